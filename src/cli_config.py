"""CLI configuration: merges flags, environment and catalog settings.

Precedence, highest first: CLI flags, ``DNAPLAN_*`` environment variables,
the catalog file's ``request``/``settings`` sections, built-in defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from constants import Constants
from registry.catalog import Catalog, find_catalog

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v).strip() for v in value if str(v).strip()]


@dataclass
class RunSettings:
    """Effective settings for a ``plan`` run."""
    modules: List[str] = field(default_factory=list)
    framework: Optional[str] = None
    exclude: List[str] = field(default_factory=list)
    error_on_warnings: bool = False
    warnings_as_errors: bool = False


def resolve_catalog_path(args) -> Optional[str]:
    """Catalog path from --catalog, then DNAPLAN_CATALOG, then default filenames."""
    cli_path = getattr(args, "CATALOG", None)
    if cli_path:
        return cli_path
    env_path = os.environ.get(Constants.ENV_CATALOG)
    if env_path and env_path.strip():
        return env_path.strip()
    return find_catalog(os.getcwd())


def _setting(settings: Mapping[str, Any], key: str) -> bool:
    """Boolean setting from the catalog, accepting dashed or underscored keys."""
    for name in (key, key.replace("_", "-")):
        if name in settings:
            return _as_bool(settings[name])
    return False


def resolve_run_settings(args, catalog: Catalog) -> RunSettings:
    """Merge CLI args, environment and catalog into RunSettings."""
    request = catalog.request
    settings = catalog.settings

    modules = list(getattr(args, "MODULES", None) or []) or _as_list(request.get("modules"))

    framework = getattr(args, "FRAMEWORK", None)
    if not framework:
        framework = os.environ.get(Constants.ENV_FRAMEWORK) or request.get("framework")
    if framework:
        framework = str(framework).strip().lower()

    exclude = list(getattr(args, "EXCLUDE", None) or []) or _as_list(request.get("exclude"))

    error_on_warnings = bool(getattr(args, "ERROR_ON_WARNINGS", False))
    if not error_on_warnings:
        env_value = os.environ.get(Constants.ENV_ERROR_ON_WARNINGS)
        if env_value is not None:
            error_on_warnings = _as_bool(env_value)
        else:
            error_on_warnings = _setting(settings, "error_on_warnings")

    warnings_as_errors = bool(getattr(args, "WARNINGS_AS_ERRORS", False)) or _setting(settings, "warnings_as_errors")

    resolved = RunSettings(
        modules=modules,
        framework=framework,
        exclude=exclude,
        error_on_warnings=error_on_warnings,
        warnings_as_errors=warnings_as_errors,
    )
    logger.debug("Effective run settings: %s", resolved)
    return resolved
