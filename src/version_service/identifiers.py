"""
Resolution of the hardware identifier words from an ordered list of sources.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from version_service.sources import (
    BaseSource,
    IdentifierField,
    IdentifierUnavailable,
    SourceError,
)

logger = logging.getLogger(__name__)


@dataclass
class ResolvedIdentifier:
    """Outcome of resolving one identifier field."""

    field: IdentifierField
    value: str | None = None
    source: str | None = None
    error: IdentifierUnavailable | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "source": self.source,
            "error": str(self.error) if self.error else None,
        }


def resolve_field(field: IdentifierField, sources: Sequence[BaseSource]) -> ResolvedIdentifier:
    """
    Resolve a field from the first source that can supply it.

    A source is skipped only when it raises SourceError. Content it returns
    is accepted as-is and validated later by the combiner.
    """
    causes: list[tuple[str, Exception]] = []

    for index, source in enumerate(sources):
        try:
            value = source.read(field)
        except SourceError as e:
            causes.append((source.name, e))
            if index + 1 < len(sources):
                logger.warning(
                    f"Failed to read {field.name} from {source.name} ({e}), "
                    f"attempting fallback to {sources[index + 1].name}"
                )
            continue

        logger.debug(f"Resolved {field.name}={value} from {source.name}")
        return ResolvedIdentifier(field=field, value=value, source=source.name)

    return ResolvedIdentifier(field=field, error=IdentifierUnavailable(field, causes))


def resolve_identifiers(
    sources: Sequence[BaseSource],
    fields: Iterable[IdentifierField] = tuple(IdentifierField),
) -> dict[IdentifierField, ResolvedIdentifier]:
    """Resolve each field independently of the others."""
    return {field: resolve_field(field, sources) for field in fields}
