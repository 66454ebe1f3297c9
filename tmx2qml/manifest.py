"""
Qt resource collection (.qrc) generation.

    <RCC>
        <qresource prefix="/">
            <file>GroundMap.qml</file>
            <file>base_3.png</file>
        </qresource>
    </RCC>

Entries are sorted by ordinal string comparison, so the manifest depends
only on which files exist, never on the order tiles were found in.
"""

from typing import Iterable, List


def manifest_entries(scene_filename: str, asset_filenames: Iterable[str]) -> List[str]:
    """Scene file plus every asset, sorted and without duplicates."""
    return sorted({scene_filename, *asset_filenames})


def render_manifest(entries: Iterable[str], header: List[str]) -> List[str]:
    lines = ["<!--", ""]
    lines.extend(header)
    lines.append("-->")
    lines.append("<RCC>")
    lines.append('    <qresource prefix="/">')
    for entry in entries:
        lines.append(f"        <file>{entry}</file>")
    lines.append("    </qresource>")
    lines.append("</RCC>")
    return lines
