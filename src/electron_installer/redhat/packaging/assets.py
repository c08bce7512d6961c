"""Populates the staging tree with the contents of the package."""

import asyncio
from collections.abc import Callable, Iterable
import fnmatch
from pathlib import Path
import shutil

import structlog

from ..exceptions import AssetError, InstallerError
from ..models import PackageOptions, StagingTree
from ..rendering import DESKTOP_TEMPLATE, SPEC_TEMPLATE, TemplateRenderer

logger = structlog.get_logger(__name__)

LICENSE_FILE = "LICENSE"


def create_ignore_func(
    root: Path, patterns: Iterable[str]
) -> Callable[[str, list[str]], Iterable[str]]:
    """Creates a function suitable for shutil.copytree's ignore argument."""
    patterns = list(patterns)

    def ignore(dir_path_str: str, names: list[str]) -> Iterable[str]:
        dir_path = Path(dir_path_str)
        ignored_names = set()
        for name in names:
            rel_path_str = (dir_path / name).relative_to(root).as_posix()
            for pattern in patterns:
                if fnmatch.fnmatch(rel_path_str, pattern) or fnmatch.fnmatch(
                    name, pattern
                ):
                    ignored_names.add(name)
                    break
        return ignored_names

    return ignore


def create_spec(
    options: PackageOptions, tree: StagingTree, renderer: TemplateRenderer
) -> Path:
    """See: https://fedoraproject.org/wiki/How_to_create_an_RPM_package"""
    try:
        content = renderer.render(SPEC_TEMPLATE, options)
        tree.spec_file.parent.mkdir(parents=True, exist_ok=True)
        tree.spec_file.write_text(content, encoding="utf-8")
    except (InstallerError, OSError) as e:
        raise AssetError(f"Error creating spec file: {e}") from e
    return tree.spec_file


def create_binary(options: PackageOptions, tree: StagingTree) -> Path:
    link = tree.bin_dir / options.name
    target = Path("..") / "share" / options.name / options.bin
    try:
        tree.bin_dir.mkdir(parents=True, exist_ok=True)
        link.symlink_to(target)
    except OSError as e:
        raise AssetError(f"Error creating binary file: {e}") from e
    return link


def create_desktop(
    options: PackageOptions, tree: StagingTree, renderer: TemplateRenderer
) -> Path:
    """See: http://standards.freedesktop.org/desktop-entry-spec/latest/"""
    desktop_file = tree.applications_dir / f"{options.name}.desktop"
    try:
        content = renderer.render(DESKTOP_TEMPLATE, options)
        desktop_file.parent.mkdir(parents=True, exist_ok=True)
        desktop_file.write_text(content, encoding="utf-8")
    except (InstallerError, OSError) as e:
        raise AssetError(f"Error creating desktop file: {e}") from e
    return desktop_file


def create_icon(options: PackageOptions, tree: StagingTree) -> Path:
    icon_file = tree.pixmaps_dir / f"{options.name}.png"
    try:
        icon_file.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(options.icon, icon_file)
    except OSError as e:
        raise AssetError(f"Error creating icon file: {e}") from e
    return icon_file


def create_copyright(options: PackageOptions, tree: StagingTree) -> Path:
    copyright_file = tree.doc_dir / "copyright"
    try:
        license_text = (Path(options.src) / LICENSE_FILE).read_bytes()
        copyright_file.parent.mkdir(parents=True, exist_ok=True)
        copyright_file.write_bytes(license_text)
    except OSError as e:
        raise AssetError(f"Error creating copyright file: {e}") from e
    return copyright_file


def create_application(options: PackageOptions, tree: StagingTree) -> Path:
    src = Path(options.src)
    try:
        shutil.copytree(
            src,
            tree.application_dir,
            symlinks=True,
            ignore=create_ignore_func(src, options.exclude) if options.exclude else None,
            dirs_exist_ok=True,
        )
    except OSError as e:
        raise AssetError(f"Error copying application directory: {e}") from e
    return tree.application_dir


async def assemble_assets(
    options: PackageOptions, tree: StagingTree, renderer: TemplateRenderer
) -> list[Path]:
    """
    Writes the spec file, binary link, desktop entry, icon, copyright and
    application payload concurrently. Each writes a disjoint part of the tree.

    The first failure propagates; siblings are left to finish and nothing is
    rolled back.
    """
    logger.info("Assembling package contents", root=str(tree.root))
    paths = await asyncio.gather(
        asyncio.to_thread(create_spec, options, tree, renderer),
        asyncio.to_thread(create_binary, options, tree),
        asyncio.to_thread(create_desktop, options, tree, renderer),
        asyncio.to_thread(create_icon, options, tree),
        asyncio.to_thread(create_copyright, options, tree),
        asyncio.to_thread(create_application, options, tree),
    )
    return list(paths)
