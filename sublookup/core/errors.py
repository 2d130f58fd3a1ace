from dataclasses import dataclass


@dataclass
class LookupFailure(Exception):
    """User-level query error, reported to callers instead of a record."""

    code: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigurationError(Exception):
    code: str
    message: str

    def __str__(self) -> str:
        return self.message


# Known error codes
TERM_TOO_SHORT = "TERM_TOO_SHORT"
NO_MATCH = "NO_MATCH"
INVALID_REQUEST = "INVALID_REQUEST"
INVALID_TYPE = "INVALID_TYPE"
CONFIG_MISSING = "CONFIG_MISSING"
MANIFEST_INVALID = "MANIFEST_INVALID"


__all__ = [
    "LookupFailure",
    "ConfigurationError",
    "TERM_TOO_SHORT",
    "NO_MATCH",
    "INVALID_REQUEST",
    "INVALID_TYPE",
    "CONFIG_MISSING",
    "MANIFEST_INVALID",
]
