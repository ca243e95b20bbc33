"""
Base identifier source class that all sources inherit from.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from version_service.config import Config


class IdentifierField(Enum):
    """OCOTP unique-ID words. CFG0 holds the low half, CFG1 the high half."""

    CFG0 = "cfg0"
    CFG1 = "cfg1"


class SourceError(Exception):
    """Raised when a source cannot supply a field."""

    def __init__(self, source: str, field: IdentifierField, message: str):
        self.source = source
        self.field = field
        super().__init__(message)


class IdentifierUnavailable(Exception):
    """Raised when every source failed for a field."""

    def __init__(self, field: IdentifierField, causes: list[tuple[str, Exception]]):
        self.field = field
        self.causes = causes
        detail = "; ".join(f"{name}: {err}" for name, err in causes) or "no sources configured"
        super().__init__(f"{field.name} unavailable ({detail})")


class BaseSource(ABC):
    """
    Abstract base class for identifier sources.

    Subclasses must implement `read`, returning the field as an
    8-character lowercase hex string or raising SourceError.
    """

    name: str = "base"
    description: str = "Base identifier source"

    def __init__(self, config: Config):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @abstractmethod
    def read(self, field: IdentifierField) -> str:
        """
        Read the raw hex value of a field.

        Raises:
            SourceError: If this source cannot supply the field.
        """
        pass

    def fail(self, field: IdentifierField, message: str) -> SourceError:
        """Build a SourceError attributed to this source."""
        return SourceError(self.name, field, message)
