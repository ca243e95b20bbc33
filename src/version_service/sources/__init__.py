"""
Hardware identifier sources for Version Service.

Each source can read the CFG0/CFG1 unique-ID words. Sources are tried in
registry order; later entries are fallbacks for earlier ones.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from version_service.sources.base import (
    BaseSource,
    IdentifierField,
    IdentifierUnavailable,
    SourceError,
)
from version_service.sources.nvmem import NvmemSource
from version_service.sources.otp import OtpFileSource

if TYPE_CHECKING:
    from version_service.config import Config

# Registry of identifier sources, in priority order
SOURCES: dict[str, type[BaseSource]] = {
    "otp": OtpFileSource,
    "nvmem": NvmemSource,
}


def build_sources(config: Config) -> list[BaseSource]:
    """Instantiate all registered sources in priority order."""
    return [cls(config) for cls in SOURCES.values()]


def list_sources() -> list[str]:
    """List all available source names."""
    return list(SOURCES.keys())


__all__ = [
    "BaseSource",
    "IdentifierField",
    "IdentifierUnavailable",
    "SourceError",
    "OtpFileSource",
    "NvmemSource",
    "build_sources",
    "list_sources",
    "SOURCES",
]
