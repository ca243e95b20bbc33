"""
Redis publisher for Version Service.

Writes the provisioning record as fields of a single Redis hash.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

import redis

if TYPE_CHECKING:
    from version_service.config import Config

logger = logging.getLogger(__name__)

DEFAULT_REDIS_PORT = 6379


@dataclass
class PublishResult:
    """Result of a publish operation."""

    hash_name: str
    fields_written: int = 0
    duration_ms: float = 0.0


def parse_address(addr: str) -> tuple[str, int]:
    """
    Split a host:port store address.

    IPv6 hosts may be bracketed ("[::1]:6379"). The port defaults to 6379.

    Raises:
        ValueError: If the address is empty or the port is not a valid number.
    """
    addr = addr.strip()
    if not addr:
        raise ValueError("empty address")

    if addr.startswith("["):
        host, _, rest = addr[1:].partition("]")
        port_str = rest[1:] if rest.startswith(":") else ""
    elif addr.count(":") == 1:
        host, _, port_str = addr.partition(":")
    else:
        host, port_str = addr, ""

    if not host:
        raise ValueError(f"missing host in address '{addr}'")
    if not port_str:
        return host, DEFAULT_REDIS_PORT

    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"invalid port in address '{addr}'") from None
    if not 0 < port < 65536:
        raise ValueError(f"port out of range in address '{addr}'")
    return host, port


class Publisher:
    """
    Publishes fields to a Redis hash.

    A ping always precedes the writes, so an unreachable store never
    receives a partial record. Writes are not transactional: if one fails,
    earlier fields stay in the store.
    """

    def __init__(self, config: Config, client: redis.Redis | None = None):
        self.config = config
        self.client = client if client is not None else self._create_client()

    def _create_client(self) -> redis.Redis:
        try:
            host, port = parse_address(self.config.redis_addr)
        except ValueError as e:
            raise StoreUnreachable(
                f"Invalid Redis address '{self.config.redis_addr}': {e}"
            ) from e

        return redis.Redis(
            host=host,
            port=port,
            socket_timeout=self.config.redis_timeout,
            socket_connect_timeout=self.config.redis_timeout,
            decode_responses=True,
        )

    def ping(self) -> None:
        """
        Ping the store.

        Raises:
            StoreUnreachable: If the store does not answer.
        """
        try:
            ok = self.client.ping()
        except redis.RedisError as e:
            raise StoreUnreachable(
                f"Failed to connect to Redis at {self.config.redis_addr}: {e}"
            ) from e
        if not ok:
            raise StoreUnreachable(
                f"Failed to connect to Redis at {self.config.redis_addr}: no PONG"
            )

    def test_connection(self) -> bool:
        """
        Test connection to the store.

        Returns:
            True if the store is reachable, False otherwise.
        """
        try:
            self.ping()
        except StoreUnreachable as e:
            logger.debug(str(e))
            return False
        return True

    def publish(self, hash_name: str, fields: Mapping[str, str]) -> PublishResult:
        """
        Write each field to the named hash.

        Args:
            hash_name: Name of the Redis hash.
            fields: Field names and values, written in iteration order.

        Returns:
            PublishResult with the number of fields written.

        Raises:
            StoreUnreachable: If the ping fails. No field is written.
            StoreWriteError: If a field write fails after a successful ping.
        """
        self.ping()

        start = time.perf_counter()
        result = PublishResult(hash_name=hash_name)
        for key, value in fields.items():
            try:
                self.client.hset(hash_name, key, value)
            except redis.RedisError as e:
                raise StoreWriteError(
                    f"Failed to set Redis hash field {key}: {e}", field=key
                ) from e
            result.fields_written += 1

        result.duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Wrote {result.fields_written} fields to '{hash_name}' "
            f"in {result.duration_ms:.0f}ms"
        )
        return result

    def close(self) -> None:
        self.client.close()


class StoreUnreachable(Exception):
    """Raised when the store cannot be reached."""

    pass


class StoreWriteError(Exception):
    """Raised when a field write fails after the store was reachable."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)
