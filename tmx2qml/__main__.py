#!/usr/bin/env python3

"""
tmx2qml - Export a Tiled map to a QtQuick scene

Usage:
    python -m tmx2qml <path-to-tmx-file>

Writes <Name>Map.qml, <Name>Map.qrc and one PNG per used tile into the
current directory. Set TMX2QML_LOG_LEVEL=DEBUG for detailed output.
"""

import logging
import sys
from typing import List, Optional

from . import APPLICATION_NAME, __version__
from .errors import Tmx2QmlError, UsageError
from .exporter import export_file
from .logging_config import setup_logging

logger = logging.getLogger(f"{__name__}.main")


def print_usage():
    print("Usage :")
    print(f"    {APPLICATION_NAME} <path-to-tmx-file>")


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv

    setup_logging()

    try:
        if len(args) != 1:
            raise UsageError(f"expected 1 argument, got {len(args)}")

        logger.debug(f"{APPLICATION_NAME} {__version__}")
        result = export_file(args[0])

    except UsageError:
        print_usage()
        return 1
    except Tmx2QmlError as e:
        logger.error(f"Error: {e}")
        return 1

    logger.info(f"Done: {result.scene_filename}, {result.manifest_filename}, "
                f"{len(result.assets)} tile images")
    return 0


if __name__ == "__main__":
    sys.exit(main())
