"""Test for running the installer as a module."""

import runpy
from unittest.mock import patch


def test_main_module_entrypoint() -> None:
    """Tests that `python -m electron_installer.redhat` calls the CLI."""
    with patch("electron_installer.redhat.cli.cli") as mock_cli:
        runpy.run_module("electron_installer.redhat", run_name="__main__")
    mock_cli.assert_called_once()
