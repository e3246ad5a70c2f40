"""Instantiate planned modules in order and collect their generated files.

The installer is the consumer of a ``Plan``: for each module id, in plan
order, it calls the registered factory with the module descriptor and the
install context, then asks the instance for its files. Progress is reported
to observers passed in explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from common.logging_utils import Timer, extra_context, is_debug_enabled
from errors import InstallationError
from registry.module_registry import ModuleRegistry
from resolution.models import Plan

logger = logging.getLogger(__name__)


class InstallStage(Enum):
    """Lifecycle points reported to observers."""
    STARTED = "started"
    MODULE_STARTED = "module_started"
    MODULE_SKIPPED = "module_skipped"
    MODULE_COMPLETED = "module_completed"
    MODULE_FAILED = "module_failed"
    COMPLETED = "completed"


@dataclass(frozen=True)
class InstallEvent:
    """Notification sent to observers."""
    stage: InstallStage
    module_id: Optional[str] = None
    index: int = 0
    total: int = 0
    error: Optional[BaseException] = None


Observer = Callable[[InstallEvent], None]


@dataclass(frozen=True)
class GeneratedFile:
    """A file emitted by a module's generator."""
    relative_path: str
    content: str
    executable: bool = False
    overwrite: bool = True
    module_id: str = ""


@dataclass
class InstallContext:
    """Inputs shared by every module factory during one installation."""
    project_name: str
    framework: str
    output_path: str = "."
    module_config: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    global_config: Dict[str, Any] = field(default_factory=dict)
    active_modules: List[str] = field(default_factory=list)

    def config_for(self, module_id: str) -> Dict[str, Any]:
        """Global settings overlaid with the module's own settings."""
        merged = dict(self.global_config)
        merged.update(self.module_config.get(module_id, {}))
        return merged


@dataclass
class InstallResult:
    """Instances and files produced by an installation."""
    instances: Dict[str, Any] = field(default_factory=dict)
    files: List[GeneratedFile] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def installed(self) -> List[str]:
        return list(self.instances)


def _coerce_file(raw: Any, module_id: str) -> GeneratedFile:
    """Accept GeneratedFile instances or mappings with path/content keys."""
    if isinstance(raw, GeneratedFile):
        if raw.module_id:
            return raw
        return GeneratedFile(raw.relative_path, raw.content, raw.executable, raw.overwrite, module_id)
    if isinstance(raw, Mapping):
        path = raw.get("relative_path") or raw.get("relativePath") or raw.get("path")
        if not path:
            raise ValueError(f"generated file from {module_id} has no path")
        return GeneratedFile(
            relative_path=str(path),
            content=str(raw.get("content", "")),
            executable=bool(raw.get("executable", False)),
            overwrite=bool(raw.get("overwrite", True)),
            module_id=module_id,
        )
    raise ValueError(f"unsupported generated file type from {module_id}: {type(raw).__name__}")


class Installer:
    """Runs module factories in plan order."""

    def __init__(self, registry: ModuleRegistry, observers: Optional[Sequence[Observer]] = None):
        self._registry = registry
        self._observers: List[Observer] = list(observers or [])

    def add_observer(self, observer: Observer) -> None:
        self._observers.append(observer)

    def _notify(self, event: InstallEvent) -> None:
        for observer in self._observers:
            observer(event)

    def install(self, plan: Plan, context: InstallContext) -> InstallResult:
        """Instantiate every module of ``plan`` in order.

        Modules registered without a factory are skipped (metadata-only).

        Raises:
            InstallationError: If a factory or generator fails; modules that
                completed before the failure are listed on the error.
        """
        if not isinstance(plan, Plan):
            raise TypeError("install() requires a Plan; resolve rejections first")

        result = InstallResult()
        total = len(plan.module_ids)
        context.active_modules = list(plan.module_ids)
        self._notify(InstallEvent(InstallStage.STARTED, total=total))

        for index, module_id in enumerate(plan.module_ids, start=1):
            descriptor = self._registry.get(module_id)
            factory = self._registry.get_factory(module_id)
            if descriptor is None or factory is None:
                logger.debug("No factory for %s; skipping", module_id)
                result.skipped.append(module_id)
                self._notify(InstallEvent(InstallStage.MODULE_SKIPPED, module_id, index, total))
                continue

            self._notify(InstallEvent(InstallStage.MODULE_STARTED, module_id, index, total))
            try:
                with Timer() as t:
                    instance = factory(descriptor, context)
                    files = self._generate(instance, module_id, context)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Installing %s failed: %s", module_id, e)
                self._notify(InstallEvent(InstallStage.MODULE_FAILED, module_id, index, total, error=e))
                raise InstallationError(module_id, e, result.installed) from e

            result.instances[module_id] = instance
            result.files.extend(files)
            if is_debug_enabled(logger):
                logger.debug(
                    "Module installed",
                    extra=extra_context(
                        event="module_installed",
                        component="installer",
                        action="install",
                        module_id=module_id,
                        outcome="success",
                        count=len(files),
                        duration_ms=t.duration_ms(),
                    ),
                )
            self._notify(InstallEvent(InstallStage.MODULE_COMPLETED, module_id, index, total))

        self._notify(InstallEvent(InstallStage.COMPLETED, total=total))
        logger.info("Installed %d module(s), %d file(s) generated", len(result.instances), len(result.files))
        return result

    @staticmethod
    def _generate(instance: Any, module_id: str, context: InstallContext) -> List[GeneratedFile]:
        generator = getattr(instance, "generate_files", None)
        if not callable(generator):
            return []
        produced: Iterable[Any] = generator(context) or []
        return [_coerce_file(raw, module_id) for raw in produced]
