"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    PLAN_REJECTED = 2
    EXIT_WARNINGS = 3


class Frameworks(Enum):
    """Target frameworks known to the module catalog.

    Args:
        Enum (string): Framework identifiers used in support matrices.
    """

    NEXTJS = "nextjs"
    FLUTTER = "flutter"
    REACT_NATIVE = "react-native"
    TAURI = "tauri"
    SVELTEKIT = "sveltekit"
    ELECTRON = "electron"
    TYPESCRIPT = "typescript"


class SupportLevel(Enum):
    """Support level a module declares for a framework."""

    FULL = "full"
    PARTIAL = "partial"
    UNSUPPORTED = "unsupported"

    @classmethod
    def parse(cls, value):
        """Return the SupportLevel for a raw value ("none" maps to UNSUPPORTED)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text == "none":
            return cls.UNSUPPORTED
        return cls(text)


class Severity(Enum):
    """Severity of a conflict or problem."""

    ERROR = "error"
    WARNING = "warning"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SUPPORTED_FRAMEWORKS = [f.value for f in Frameworks]
    ANY_VERSION_RANGES = ("", "*", "x", "latest")
    SEMVER_PATTERN = r"^\d+\.\d+\.\d+(-[0-9A-Za-z.-]+)?(\+[0-9A-Za-z.-]+)?$"

    CATALOG_FILES = ["dna-modules.yml", "dna-modules.yaml", "dna-modules.json"]
    CATALOG_MODULES_KEY = "modules"
    CATALOG_REQUEST_KEY = "request"
    CATALOG_SETTINGS_KEY = "settings"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "DNAPLAN_LOG_LEVEL"
    ENV_FRAMEWORK = "DNAPLAN_FRAMEWORK"
    ENV_CATALOG = "DNAPLAN_CATALOG"
    ENV_ERROR_ON_WARNINGS = "DNAPLAN_ERROR_ON_WARNINGS"
    PLANNING = "[PLAN]"
