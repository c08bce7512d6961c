"""Core logic for building Red Hat packages of Electron applications."""

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from ..exceptions import StagingError
from ..models import InstallerResult, PackageOptions, StagingTree
from ..options import resolve_options
from ..rendering import MACROS_TEMPLATE, TemplateRenderer
from ..staging import create_staging_tree
from .assets import assemble_assets
from .builder import DEFAULT_RPMBUILD, build_package, parse_macros
from .collector import collect_artifacts
from .reader import read_metadata

logger = structlog.get_logger(__name__)


class InstallerOrchestrator:
    """
    Runs the packaging pipeline for one application: metadata, options,
    staging tree, macros, assets, `rpmbuild`, artifact collection. Any stage
    failure aborts the rest.
    """

    def __init__(
        self,
        src: Path | str,
        dest: Path | str,
        config: Mapping[str, Any] | None = None,
        *,
        rpmbuild: str = DEFAULT_RPMBUILD,
        keep_staging: bool = False,
        temp_root: Path | str | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.src = str(src)
        self.dest = str(dest)
        self.config = dict(config or {})
        self.rpmbuild = rpmbuild
        self.keep_staging = keep_staging
        self.temp_root = temp_root
        self.renderer = renderer or TemplateRenderer()

    async def resolve(self) -> PackageOptions:
        metadata = await asyncio.to_thread(read_metadata, self.src)
        return resolve_options(self.src, self.dest, self.config, metadata)

    async def create_macros(
        self, options: PackageOptions, tree: StagingTree
    ) -> list[tuple[str, str]]:
        """Renders the macros file into the staging tree and returns its macros."""
        content = self.renderer.render(MACROS_TEMPLATE, options, dir=str(tree.root))
        try:
            await asyncio.to_thread(tree.macros_file.write_text, content, "utf-8")
        except OSError as e:
            raise StagingError(f"Error creating macros file: {e}") from e
        return parse_macros(content)

    async def run(self) -> InstallerResult:
        logger.info("Creating package (this may take a while)", src=self.src)
        options = await self.resolve()
        tree = await asyncio.to_thread(
            create_staging_tree,
            options,
            temp_root=self.temp_root,
            track=not self.keep_staging,
        )
        macros = await self.create_macros(options, tree)
        await assemble_assets(options, tree, self.renderer)
        await build_package(options, tree, macros, rpmbuild=self.rpmbuild)
        artifacts = await collect_artifacts(options, tree, self.renderer)
        logger.info("Successfully created package", dest=options.dest)
        return InstallerResult(options=options, staging_root=tree.root, artifacts=artifacts)

    def build_package(self) -> InstallerResult:
        return asyncio.run(self.run())


async def create_installer(
    src: Path | str, dest: Path | str, **config: Any
) -> InstallerResult:
    """Convenience wrapper around InstallerOrchestrator for library callers."""
    return await InstallerOrchestrator(src, dest, config).run()
