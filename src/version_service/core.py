"""
Core orchestration module for Version Service.

Reads the release file and hardware identifiers, derives the serial
numbers and publishes the assembled record.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from version_service.config import Config
from version_service.identifiers import ResolvedIdentifier, resolve_identifiers
from version_service.os_release import read_os_release
from version_service.publisher import Publisher, PublishResult
from version_service.serial import SerialNumbers, combine
from version_service.sources import BaseSource, IdentifierField, build_sources

logger = logging.getLogger(__name__)

SERIAL_FIELDS = ("serial_number", "serial_number_real")


@dataclass
class ProvisioningReport:
    """Everything gathered in one run, before publishing."""

    hash_name: str
    version: str
    release: dict[str, str] = field(default_factory=dict)
    identifiers: dict[IdentifierField, ResolvedIdentifier] = field(default_factory=dict)
    serials: SerialNumbers | None = None
    warnings: list[str] = field(default_factory=list)

    def fields(self) -> dict[str, str]:
        """Fields to write to the store: release entries, then serials if derived."""
        fields = dict(self.release)
        if self.serials is not None:
            fields.update(self.serials.to_fields())
        return fields

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary for serialization."""
        return {
            "meta": {
                "hash": self.hash_name,
                "version": self.version,
            },
            "release": self.release,
            "identifiers": {f.value: r.to_dict() for f, r in self.identifiers.items()},
            "serials": self.serials.to_fields() if self.serials else None,
            "warnings": self.warnings,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize report to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


class VersionService:
    """
    Main orchestrator for one provisioning run.

    Sources and publisher can be injected; by default they are built
    from the configuration.
    """

    def __init__(
        self,
        config: Config | None = None,
        sources: Sequence[BaseSource] | None = None,
        publisher: Publisher | None = None,
    ):
        self.config = config or Config()
        self.sources = list(sources) if sources is not None else build_sources(self.config)
        self._publisher = publisher
        self._owns_publisher = publisher is None

    @property
    def publisher(self) -> Publisher:
        if self._publisher is None:
            self._publisher = Publisher(self.config)
        return self._publisher

    def collect(self) -> ProvisioningReport:
        """
        Gather the release record and identifiers.

        Returns:
            ProvisioningReport. Identifier problems are recorded as warnings.

        Raises:
            ReadError: If the release file cannot be read.
        """
        from version_service import __version__

        report = ProvisioningReport(hash_name=self.config.redis_hash, version=__version__)
        report.release = read_os_release(self.config.release_path)

        report.identifiers = resolve_identifiers(self.sources)
        report.serials, problems = combine(report.identifiers)

        for problem in problems:
            self._warn(report, problem)
        if report.serials is None:
            for name in SERIAL_FIELDS:
                self._warn(report, f"{name} will not be published")

        return report

    def publish(self, report: ProvisioningReport) -> PublishResult:
        """
        Write the report's fields to the store.

        Raises:
            StoreUnreachable: If the store cannot be reached.
            StoreWriteError: If a field write fails.
        """
        result = self.publisher.publish(report.hash_name, report.fields())
        logger.info(
            f"Stored {result.fields_written} fields in Redis hash '{report.hash_name}'"
        )
        return result

    def run(self) -> tuple[ProvisioningReport, PublishResult]:
        """Collect and publish in one call."""
        report = self.collect()
        try:
            result = self.publish(report)
        finally:
            self.close()
        return report, result

    def close(self) -> None:
        if self._owns_publisher and self._publisher is not None:
            self._publisher.close()
            self._publisher = None

    @staticmethod
    def _warn(report: ProvisioningReport, message: str) -> None:
        report.warnings.append(message)
        logger.warning(message)
