"""Creation and tracking of the temporary `rpmbuild` top directories."""

import atexit
from pathlib import Path
import shutil
import tempfile

import structlog

from .exceptions import ConfigurationError, StagingError
from .models import PackageOptions, StagingTree

logger = structlog.get_logger(__name__)

STAGING_PREFIX = "electron-"

_tracked_roots: set[Path] = set()


def _cleanup_tracked_roots() -> None:
    while _tracked_roots:
        shutil.rmtree(_tracked_roots.pop(), ignore_errors=True)


atexit.register(_cleanup_tracked_roots)


def create_staging_tree(
    options: PackageOptions,
    *,
    temp_root: Path | str | None = None,
    track: bool = True,
) -> StagingTree:
    """
    Allocates a fresh temporary directory named `<name>_<version>_<arch>` and
    creates the SPECS, BUILD and RPMS layout `rpmbuild` expects inside it.

    Tracked directories are removed when the interpreter exits.
    """
    if not options.arch:
        raise ConfigurationError("The target architecture (`arch`) is required.")

    try:
        parent = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=temp_root))
        if track:
            _tracked_roots.add(parent)
        tree = StagingTree(
            root=parent / f"{options.name}_{options.version}_{options.arch}",
            name=options.name,
            arch=options.arch,
        )
        for directory in tree.layout():
            directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StagingError(f"Error creating temporary directory: {e}") from e

    logger.info("Created staging tree", root=str(tree.root))
    return tree
