"""Parsing utilities for module versions and dependency ranges."""

import re
from typing import Optional

import semantic_version

from constants import Constants
from .models import RangeMode, VersionSpec

_SEMVER_RE = re.compile(Constants.SEMVER_PATTERN)
_PRERELEASE_IN_RANGE_RE = re.compile(r"\d+\.\d+\.\d+-[0-9A-Za-z]")


def is_valid_version(version: str) -> bool:
    """Return True if ``version`` is a full semantic version (1.2.3[-pre][+build])."""
    if not isinstance(version, str) or not _SEMVER_RE.match(version.strip()):
        return False
    try:
        semantic_version.Version(version.strip())
    except ValueError:
        return False
    return True


def _determine_range_mode(spec: str) -> RangeMode:
    """Determine range mode from spec string."""
    if spec.lower() in Constants.ANY_VERSION_RANGES:
        return RangeMode.ANY
    range_ops = ['^', '~', '*', 'x', 'X', ' - ', '<', '>', '=', '||', ' ']
    if any(op in spec for op in range_ops):
        return RangeMode.RANGE
    if is_valid_version(spec):
        return RangeMode.EXACT
    # Partial versions such as "1" or "1.2" are npm ranges
    return RangeMode.RANGE


def _determine_include_prerelease(spec: str) -> bool:
    """True when the range itself names a pre-release tag, e.g. ``^2.0.0-beta.1``."""
    return bool(_PRERELEASE_IN_RANGE_RE.search(spec))


def normalize_range(spec_str: str) -> str:
    """Normalize npm range syntax (hyphen, x-ranges) into SimpleSpec-compatible form."""
    s = spec_str.strip()

    # Hyphen ranges: "1.2.3 - 1.4.5" => ">=1.2.3,<=1.4.5"
    m = re.match(r'^\s*([0-9A-Za-z\.\-\+]+)\s+-\s+([0-9A-Za-z\.\-\+]+)\s*$', s)
    if m:
        return f">={m.group(1)},<={m.group(2)}"

    # x-ranges: 1.2.x or 1.x or 1.* -> comparator pairs
    s2 = s.replace('*', 'x').lower()
    m = re.match(r'^\s*(\d+)\.(\d+)\.x\s*$', s2)
    if m:
        major, minor = int(m.group(1)), int(m.group(2))
        return f">={major}.{minor}.0,<{major}.{minor + 1}.0"

    m = re.match(r'^\s*(\d+)(\.x)?\s*$', s2)
    if m:
        major = int(m.group(1))
        return f">={major}.0.0,<{major + 1}.0.0"

    return s


def build_matcher(spec: VersionSpec):
    """Return a semantic_version spec object for a RANGE/EXACT VersionSpec.

    Raises:
        ValueError: If the range cannot be parsed by NpmSpec or SimpleSpec.
    """
    try:
        return semantic_version.NpmSpec(spec.raw)
    except ValueError:
        return semantic_version.SimpleSpec(normalize_range(spec.raw))


def parse_version_range(raw_spec: Optional[str]) -> VersionSpec:
    """Construct a VersionSpec from a declared dependency range.

    ``None``, empty strings, ``*`` and ``latest`` accept any version.

    Raises:
        ValueError: If the range is not valid npm/semver range syntax.
    """
    if raw_spec is None:
        return VersionSpec(raw="*", mode=RangeMode.ANY, include_prerelease=False)
    spec = str(raw_spec).strip()
    mode = _determine_range_mode(spec)
    result = VersionSpec(raw=spec or "*", mode=mode, include_prerelease=_determine_include_prerelease(spec))
    if mode != RangeMode.ANY:
        build_matcher(result)
    return result
