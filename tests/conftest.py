"""Pytest fixtures for the entire electron-installer-redhat test suite."""

import json
from pathlib import Path
import struct
from typing import Any, Callable

import pytest

from electron_installer.redhat.models import PackageOptions, StagingTree
from electron_installer.redhat.options import resolve_options
from electron_installer.redhat.rendering import TemplateRenderer
from electron_installer.redhat.staging import create_staging_tree

STUB_RPMBUILD = """#!/bin/sh
topdir=""
target=""
while [ $# -gt 0 ]; do
  case "$1" in
    --define)
      case "$2" in
        _topdir\\ *) topdir="${2#_topdir }" ;;
      esac
      shift 2 ;;
    --target) target="$2"; shift 2 ;;
    *) shift ;;
  esac
done
mkdir -p "$topdir/RPMS/$target"
echo "dummy package" > "$topdir/RPMS/$target/demo-1.2.3-1.$target.rpm"
echo "stub rpmbuild ran" >&2
"""

FAILING_RPMBUILD = """#!/bin/sh
echo "error: Bad exit status from /var/tmp/rpm-tmp (%install)" >&2
exit 1
"""


def _write_executable(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(0o755)
    return path


@pytest.fixture
def make_app(tmp_path: Path) -> Callable[..., Path]:
    """A factory fixture creating a minimal unpacked Electron application."""

    def _make_app(
        package: dict[str, Any] | None = None,
        license_text: str | None = "MIT License\n",
        dirname: str = "app",
    ) -> Path:
        app_dir = tmp_path / dirname
        resources = app_dir / "resources" / "app"
        resources.mkdir(parents=True)
        if package is not None:
            (resources / "package.json").write_text(json.dumps(package))
        if license_text is not None:
            (app_dir / "LICENSE").write_text(license_text)
        _write_executable(app_dir / (package or {}).get("name", "electron"), "#!/bin/sh\n")
        (app_dir / "resources" / "app" / "main.js").write_text("console.log('hi')\n")
        return app_dir

    return _make_app


@pytest.fixture
def write_asar() -> Callable[..., Path]:
    """A factory fixture writing an asar archive holding the given files."""

    def _write_asar(
        archive: Path, files: dict[str, bytes], unpacked: frozenset[str] = frozenset()
    ) -> Path:
        header: dict[str, Any] = {"files": {}}
        body = b""
        for filename, content in files.items():
            node = header
            *dirs, leaf = filename.split("/")
            for part in dirs:
                node = node["files"].setdefault(part, {"files": {}})
            if filename in unpacked:
                node["files"][leaf] = {"size": len(content), "unpacked": True}
                target = archive.with_name(archive.name + ".unpacked") / filename
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
            else:
                node["files"][leaf] = {"size": len(content), "offset": str(len(body))}
                body += content

        header_json = json.dumps(header).encode()
        padded = header_json + b"\0" * (-len(header_json) % 4)
        payload_size = 4 + len(padded)
        prefix = struct.pack("<IIII", 4, payload_size + 4, payload_size, len(header_json))
        archive.parent.mkdir(parents=True, exist_ok=True)
        archive.write_bytes(prefix + padded + body)
        return archive

    return _write_asar


@pytest.fixture
def stub_rpmbuild(tmp_path: Path) -> Path:
    """An `rpmbuild` stand-in that drops a dummy package into RPMS/<arch>."""
    return _write_executable(tmp_path / "bin" / "rpmbuild", STUB_RPMBUILD)


@pytest.fixture
def failing_rpmbuild(tmp_path: Path) -> Path:
    return _write_executable(tmp_path / "bin" / "rpmbuild-fail", FAILING_RPMBUILD)


@pytest.fixture
def demo_app(make_app: Callable[..., Path]) -> Path:
    return make_app({"name": "demo", "version": "1.2.3", "description": "A demo app"})


@pytest.fixture
def demo_options(demo_app: Path, tmp_path: Path) -> PackageOptions:
    return resolve_options(
        str(demo_app),
        str(tmp_path / "dist") + "/",
        {"arch": "x86_64"},
        {"name": "demo", "version": "1.2.3", "description": "A demo app"},
    )


@pytest.fixture
def demo_tree(demo_options: PackageOptions, tmp_path: Path) -> StagingTree:
    temp_root = tmp_path / "staging"
    temp_root.mkdir()
    return create_staging_tree(demo_options, temp_root=temp_root, track=False)


@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    return TemplateRenderer()
