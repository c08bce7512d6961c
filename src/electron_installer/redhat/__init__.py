# electron-installer-redhat/src/electron_installer/redhat/__init__.py
"""
This package builds Red Hat (`.rpm`) installers for Electron applications by
staging an `rpmbuild` tree and running `rpmbuild` against it.
"""

from .models import InstallerResult, PackageOptions
from .options import resolve_options
from .packaging.orchestrator import InstallerOrchestrator, create_installer

__all__ = [
    "InstallerOrchestrator",
    "InstallerResult",
    "PackageOptions",
    "create_installer",
    "resolve_options",
]
