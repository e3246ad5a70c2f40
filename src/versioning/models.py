"""Data models for version range handling."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RangeMode(Enum):
    """How a declared version range is matched."""
    ANY = "any"
    EXACT = "exact"
    RANGE = "range"


@dataclass(frozen=True)
class VersionSpec:
    """Normalized representation of a version range and derived behavior flags."""
    raw: str
    mode: RangeMode
    include_prerelease: bool


@dataclass(frozen=True)
class RangeCheck:
    """Outcome of matching a registered version against a declared range."""
    required: str
    actual: str
    satisfied: bool
    error: Optional[str] = None
