"""Tests for the InstallerOrchestrator pipeline."""

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, patch

import pytest
from pytest import MonkeyPatch

from electron_installer.redhat.exceptions import AssetError, ConfigurationError, ProcessError
from electron_installer.redhat.packaging.orchestrator import (
    InstallerOrchestrator,
    create_installer,
)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.mark.asyncio
async def test_end_to_end(
    demo_app: Path, stub_rpmbuild: Path, tmp_path: Path, isolated_home: Path
) -> None:
    dest = str(tmp_path / "dist") + "/"
    orchestrator = InstallerOrchestrator(
        demo_app, dest, {"arch": "x86_64"}, rpmbuild=str(stub_rpmbuild), keep_staging=True
    )

    result = await orchestrator.run()

    assert result.options.name == "demo"
    assert result.artifacts == (Path(dest + "demo-1.2.3-1.x86_64.rpm"),)
    assert result.artifacts[0].read_text() == "dummy package\n"

    spec = (result.staging_root / "SPECS" / "demo.spec").read_text()
    assert "Name: demo" in spec
    assert "Version: 1.2.3" in spec
    assert "BuildArch: x86_64" in spec
    assert result.staging_root.name == "demo_1.2.3_x86_64"
    assert (result.staging_root / "rpmmacros").read_text() == (
        f"%_topdir {result.staging_root}\n"
    )
    assert not (isolated_home / ".rpmmacros").exists()


@pytest.mark.asyncio
async def test_asset_failure_skips_build_and_collection(
    make_app: Callable[..., Path], tmp_path: Path
) -> None:
    app = make_app({"name": "demo", "version": "1.2.3"}, license_text=None)
    orchestrator = InstallerOrchestrator(app, str(tmp_path / "dist/"), {"arch": "x86_64"})

    with (
        patch(
            "electron_installer.redhat.packaging.orchestrator.build_package",
            new_callable=AsyncMock,
        ) as mock_build,
        patch(
            "electron_installer.redhat.packaging.orchestrator.collect_artifacts",
            new_callable=AsyncMock,
        ) as mock_collect,
    ):
        with pytest.raises(AssetError, match="Error creating copyright file"):
            await orchestrator.run()

    mock_build.assert_not_awaited()
    mock_collect.assert_not_awaited()


@pytest.mark.asyncio
async def test_build_failure_moves_nothing(
    demo_app: Path, failing_rpmbuild: Path, tmp_path: Path
) -> None:
    dest = tmp_path / "dist"
    orchestrator = InstallerOrchestrator(
        demo_app, str(dest) + "/", {"arch": "x86_64"}, rpmbuild=str(failing_rpmbuild)
    )

    with pytest.raises(ProcessError, match="Bad exit status"):
        await orchestrator.run()

    assert not dest.exists()


@pytest.mark.asyncio
async def test_missing_arch(demo_app: Path, tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        await InstallerOrchestrator(demo_app, str(tmp_path)).run()


@pytest.mark.asyncio
async def test_create_installer_rename_policy(
    demo_app: Path, stub_rpmbuild: Path, tmp_path: Path, monkeypatch: MonkeyPatch
) -> None:
    monkeypatch.setenv("PATH", f"{stub_rpmbuild.parent}:/usr/bin:/bin")

    result = await create_installer(
        demo_app,
        str(tmp_path / "out"),
        arch="x86_64",
        productName="Demo",
        rename=lambda dest, name: f"{dest}/{{{{ name }}}}.{{{{ arch }}}}.rpm",
    )

    assert result.artifacts == (tmp_path / "out" / "demo.x86_64.rpm",)
    assert result.options.product_name == "Demo"


def test_build_package_sync(demo_app: Path, stub_rpmbuild: Path, tmp_path: Path) -> None:
    result = InstallerOrchestrator(
        demo_app, str(tmp_path / "dist") + "/", {"arch": "x86_64"}, rpmbuild=str(stub_rpmbuild)
    ).build_package()

    assert len(result.artifacts) == 1
