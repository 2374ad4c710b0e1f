"""Error definitions for bundlegen."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_DISCOVERY = "E_DISCOVERY"
E_MISSING_ARTIFACT = "E_MISSING_ARTIFACT"
E_BUILD_FAILED = "E_BUILD_FAILED"
E_FORMAT = "E_FORMAT"
E_SIZE_LIMIT = "E_SIZE_LIMIT"
E_BAD_MAGIC = "E_BAD_MAGIC"
E_UNSUPPORTED_VERSION = "E_UNSUPPORTED_VERSION"
E_TRUNCATED = "E_TRUNCATED"
E_CONFIG = "E_CONFIG"
E_WRITE_IO = "E_WRITE_IO"


@dataclass(eq=False)
class BundleError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class DiscoveryError(BundleError):
    """Content root is missing, empty or ambiguous."""


class MissingArtifactError(BundleError):
    """A platform build did not produce an expected group bundle."""


class BuildError(BundleError):
    """The external build step reported a failure."""


class FormatError(BundleError):
    """Container layout invariant violated while writing."""


class BadMagicError(BundleError):
    pass


class UnsupportedVersionError(BundleError):
    pass


class TruncatedFileError(BundleError):
    pass


class ConfigError(BundleError):
    pass


def discovery_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> DiscoveryError:
    return DiscoveryError(code=E_DISCOVERY, message=message, context=context)


def format_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> FormatError:
    return FormatError(code=E_FORMAT, message=message, context=context)


def config_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> ConfigError:
    return ConfigError(code=E_CONFIG, message=message, context=context)


__all__ = [
    "BundleError",
    "DiscoveryError",
    "MissingArtifactError",
    "BuildError",
    "FormatError",
    "BadMagicError",
    "UnsupportedVersionError",
    "TruncatedFileError",
    "ConfigError",
    "discovery_error",
    "format_error",
    "config_error",
    "E_DISCOVERY",
    "E_MISSING_ARTIFACT",
    "E_BUILD_FAILED",
    "E_FORMAT",
    "E_SIZE_LIMIT",
    "E_BAD_MAGIC",
    "E_UNSUPPORTED_VERSION",
    "E_TRUNCATED",
    "E_CONFIG",
    "E_WRITE_IO",
]
