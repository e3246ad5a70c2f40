"""Range matching for registered module versions using semantic versioning."""

import logging
from typing import Optional, Union

import semantic_version

from .models import RangeCheck, RangeMode, VersionSpec
from .parser import build_matcher, parse_version_range

logger = logging.getLogger(__name__)


def _match_exact(spec: VersionSpec, version: semantic_version.Version) -> bool:
    """Exact ranges compare by semantic version, ignoring build metadata."""
    wanted = semantic_version.Version(spec.raw.lstrip("="))
    return version.truncate("prerelease") == wanted.truncate("prerelease")


def _match_range(spec: VersionSpec, version: semantic_version.Version) -> bool:
    """Apply npm range semantics (``^``, ``~``, x-ranges, hyphen ranges, comparators).

    A pre-release version only matches a range that names a pre-release
    itself; the SimpleSpec fallback would otherwise let it through.
    """
    if version.prerelease and not spec.include_prerelease:
        return False
    matcher = build_matcher(spec)
    # NpmSpec exposes .match(); SimpleSpec supports "ver in spec"
    is_match = getattr(matcher, "match", None)
    if callable(is_match):
        return bool(matcher.match(version))
    return version in matcher


def check_range(required: Optional[Union[str, VersionSpec]], actual: str) -> RangeCheck:
    """Check a registered ``actual`` version against a ``required`` range.

    Never raises: unparsable input is reported through ``RangeCheck.error``
    with ``satisfied=False``.
    """
    try:
        spec = required if isinstance(required, VersionSpec) else parse_version_range(required)
    except ValueError as e:
        return RangeCheck(required=str(required), actual=actual, satisfied=False,
                          error=f"Invalid version range: {str(e)}")

    if spec.mode == RangeMode.ANY:
        return RangeCheck(required=spec.raw, actual=actual, satisfied=True)

    try:
        version = semantic_version.Version(actual)
    except ValueError as e:
        return RangeCheck(required=spec.raw, actual=actual, satisfied=False,
                          error=f"Invalid semantic version: {str(e)}")

    try:
        if spec.mode == RangeMode.EXACT:
            ok = _match_exact(spec, version)
        else:
            ok = _match_range(spec, version)
    except ValueError as e:
        return RangeCheck(required=spec.raw, actual=actual, satisfied=False,
                          error=f"Invalid semver spec: {str(e)}")

    logger.debug("Range check %s against %s: %s", actual, spec.raw, ok)
    return RangeCheck(required=spec.raw, actual=actual, satisfied=ok)


def satisfies(version: str, required: Optional[str]) -> bool:
    """Return True when ``version`` satisfies the ``required`` range."""
    return check_range(required, version).satisfied
