"""
depininstaller - Host preflight checks, install and safe updates for the DePIN worker container
"""

__version__ = "0.1.0"

from .core import InstallerError, WorkerInstaller

__all__ = ["WorkerInstaller", "InstallerError"]
