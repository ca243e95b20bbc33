"""
Fallback identifier source: the OCOTP nvmem device.

The fuse bank is exposed as a flat byte device. Each word is stored
little-endian and is rendered most significant byte first.
"""

from __future__ import annotations

from version_service.sources.base import BaseSource, IdentifierField

# Byte offset of each fuse word within the nvmem device
NVMEM_OFFSETS = {
    IdentifierField.CFG0: 4,
    IdentifierField.CFG1: 8,
}

WORD_SIZE = 4


class NvmemSource(BaseSource):
    """Reads CFG0/CFG1 from the imx-ocotp nvmem device."""

    name = "nvmem"
    description = "imx-ocotp nvmem device (CFG0 @ 4, CFG1 @ 8)"

    def read(self, field: IdentifierField) -> str:
        path = self.config.nvmem_path
        offset = NVMEM_OFFSETS[field]

        try:
            with open(path, "rb") as f:
                f.seek(offset)
                data = f.read(WORD_SIZE)
        except OSError as e:
            raise self.fail(
                field, f"failed to read {path} at offset {offset}: {e}"
            ) from e

        if len(data) != WORD_SIZE:
            raise self.fail(
                field,
                f"short read from {path} at offset {offset}: "
                f"got {len(data)} bytes, expected {WORD_SIZE}",
            )

        value = bytes(reversed(data)).hex()
        self.logger.debug(f"Read {field.name}={value} from {path} at offset {offset}")
        return value
