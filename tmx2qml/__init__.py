"""
tmx2qml - Export Tiled maps to QtQuick scenes

Requisitos:
    pip install pillow
"""

APPLICATION_NAME = "tmx2qml"
PROJECT_URL = "https://github.com/mchiasson/tmx2qml"

__version__ = "0.1.0"

from .errors import Tmx2QmlError, UsageError, MapParseError, OutputWriteError
from .animations import AnimationRegistry
from .assets import AssetCollector
from .exporter import MapExporter, ExportResult, export_file, load_map

__all__ = [
    "APPLICATION_NAME",
    "PROJECT_URL",
    "Tmx2QmlError",
    "UsageError",
    "MapParseError",
    "OutputWriteError",
    "AnimationRegistry",
    "AssetCollector",
    "MapExporter",
    "ExportResult",
    "export_file",
    "load_map",
]
