"""Moves built packages out of the staging tree."""

import asyncio
from pathlib import Path
import shutil

import structlog

from ..exceptions import CollectionError, InstallerError
from ..models import PackageOptions, StagingTree
from ..rendering import TemplateRenderer

logger = structlog.get_logger(__name__)

PACKAGE_PATTERN = "*.rpm"


def destination_for(
    options: PackageOptions, package_file: Path, renderer: TemplateRenderer
) -> Path:
    """Applies the caller's rename policy, then fills in option references."""
    dest = options.rename(options.dest, package_file.name)
    return Path(renderer.render_string(str(dest), options))


def move_package(src: Path, dest: Path) -> Path:
    dest.parent.mkdir(parents=True, exist_ok=True)
    # An existing file at `dest` is overwritten.
    return Path(shutil.move(str(src), str(dest)))


def _collect(
    options: PackageOptions, tree: StagingTree, renderer: TemplateRenderer
) -> list[Path]:
    package_files = sorted(tree.rpms_dir.glob(PACKAGE_PATTERN))
    if not package_files:
        logger.warning("No package files found", directory=str(tree.rpms_dir))
    moved = []
    for package_file in package_files:
        dest = destination_for(options, package_file, renderer)
        logger.info("Moving package", src=package_file.name, dest=str(dest))
        moved.append(move_package(package_file, dest))
    return moved


async def collect_artifacts(
    options: PackageOptions, tree: StagingTree, renderer: TemplateRenderer
) -> list[Path]:
    """Moves every `RPMS/<arch>/*.rpm` to its renamed destination."""
    try:
        return await asyncio.to_thread(_collect, options, tree, renderer)
    except (InstallerError, OSError) as e:
        raise CollectionError(f"Error moving package files: {e}") from e
