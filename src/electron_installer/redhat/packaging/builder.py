"""Invocation of `rpmbuild` against a staged spec file."""

from collections.abc import Iterable

import structlog

from ..models import PackageOptions, StagingTree
from ..process import run_command

logger = structlog.get_logger(__name__)

DEFAULT_RPMBUILD = "rpmbuild"


def parse_macros(content: str) -> list[tuple[str, str]]:
    """Parses `%name value` lines of a macros file into (name, value) pairs."""
    macros = []
    for line in content.splitlines():
        line = line.strip()
        if not line.startswith("%"):
            continue
        name, _, value = line[1:].partition(" ")
        macros.append((name, value.strip()))
    return macros


def build_command(
    options: PackageOptions, tree: StagingTree, macros: Iterable[tuple[str, str]]
) -> list[str]:
    args = ["-bb", str(tree.spec_file), "--target", str(options.arch)]
    for name, value in macros:
        args.extend(["--define", f"{name} {value}"])
    return args


async def build_package(
    options: PackageOptions,
    tree: StagingTree,
    macros: Iterable[tuple[str, str]],
    *,
    rpmbuild: str = DEFAULT_RPMBUILD,
) -> StagingTree:
    """
    Runs `rpmbuild -bb` for the target architecture. Macros are passed as
    `--define` arguments so concurrent builds never share configuration.
    """
    logger.info("Building package", arch=options.arch, spec=str(tree.spec_file))
    await run_command(rpmbuild, build_command(options, tree, macros))
    return tree
