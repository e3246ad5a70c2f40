"""Plan consumers: module instantiation in plan order."""

from .installer import GeneratedFile, InstallContext, InstallEvent, Installer, InstallResult, InstallStage

__all__ = [
    "GeneratedFile",
    "InstallContext",
    "InstallEvent",
    "InstallResult",
    "InstallStage",
    "Installer",
]
