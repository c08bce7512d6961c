"""Reads `package.json` out of a packaged or unpackaged Electron application."""

import json
from pathlib import Path
import struct
from typing import Any, Protocol

import structlog

from ..exceptions import MetadataError

logger = structlog.get_logger(__name__)

ASAR_PATH = Path("resources") / "app.asar"
PACKAGE_JSON_PATH = Path("resources") / "app" / "package.json"

# Two Chromium pickles: a 4-byte size pickle holding the header pickle size,
# then the header pickle's payload size and JSON string length.
ASAR_PREFIX_FORMAT = "<IIII"
ASAR_PREFIX_SIZE = struct.calcsize(ASAR_PREFIX_FORMAT)


class MetadataSource(Protocol):
    def exists(self) -> bool: ...

    def read(self) -> dict[str, Any]: ...


def _parse_descriptor(raw: bytes | str) -> dict[str, Any]:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"package.json must hold an object, got {type(data).__name__}")
    return data


class PackedSource:
    """Reads files out of an asar archive."""

    def __init__(self, archive_path: Path) -> None:
        self.archive_path = archive_path

    def exists(self) -> bool:
        return self.archive_path.is_file()

    def _read_header(self, f) -> tuple[dict[str, Any], int]:
        prefix = f.read(ASAR_PREFIX_SIZE)
        if len(prefix) != ASAR_PREFIX_SIZE:
            raise ValueError(f"Truncated asar header in {self.archive_path}")
        size_pickle_len, header_size, _, json_len = struct.unpack(
            ASAR_PREFIX_FORMAT, prefix
        )
        if size_pickle_len != 4:
            raise ValueError(f"Invalid asar size pickle ({size_pickle_len})")
        header = json.loads(f.read(json_len))
        if not isinstance(header, dict):
            raise ValueError(f"Invalid asar header in {self.archive_path}")
        return header, 8 + header_size

    def _find_entry(self, header: dict[str, Any], filename: str) -> dict[str, Any]:
        node = header
        for part in Path(filename).parts:
            children = node.get("files")
            if not isinstance(children, dict) or part not in children:
                raise FileNotFoundError(f"'{filename}' not found in {self.archive_path}")
            node = children[part]
            if not isinstance(node, dict):
                raise ValueError(f"Invalid asar entry for '{filename}'")
        return node

    def extract_file(self, filename: str) -> bytes:
        with self.archive_path.open("rb") as f:
            header, base_offset = self._read_header(f)
            entry = self._find_entry(header, filename)
            if entry.get("unpacked"):
                unpacked_dir = self.archive_path.with_name(
                    self.archive_path.name + ".unpacked"
                )
                return (unpacked_dir / filename).read_bytes()
            f.seek(base_offset + int(entry["offset"]))
            return f.read(int(entry["size"]))

    def read(self) -> dict[str, Any]:
        return _parse_descriptor(self.extract_file("package.json"))


class DirectorySource:
    """Reads `package.json` from an unpacked `resources/app` directory."""

    def __init__(self, descriptor_path: Path) -> None:
        self.descriptor_path = descriptor_path

    def exists(self) -> bool:
        return self.descriptor_path.is_file()

    def read(self) -> dict[str, Any]:
        return _parse_descriptor(self.descriptor_path.read_text(encoding="utf-8"))


def select_source(src: Path | str) -> MetadataSource:
    packed = PackedSource(Path(src) / ASAR_PATH)
    if packed.exists():
        return packed
    return DirectorySource(Path(src) / PACKAGE_JSON_PATH)


def read_metadata(src: Path | str) -> dict[str, Any]:
    """
    Returns the application's `package.json` as a dict, or an empty dict when
    the application ships neither an asar archive nor an unpacked descriptor.
    """
    source = select_source(src)
    if not source.exists():
        logger.warning("No package.json found, using defaults", src=str(src))
        return {}
    try:
        metadata = source.read()
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise MetadataError(f"Error reading package: {e}") from e
    logger.debug("Read application metadata", source=type(source).__name__)
    return metadata
