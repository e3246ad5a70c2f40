"""Version parsing and range matching for module descriptors."""

from .matching import check_range, satisfies
from .models import RangeCheck, RangeMode, VersionSpec
from .parser import is_valid_version, parse_version_range

__all__ = [
    "RangeCheck",
    "RangeMode",
    "VersionSpec",
    "check_range",
    "is_valid_version",
    "parse_version_range",
    "satisfies",
]
