"""
Primary identifier source: the fsl_otp sysfs interface.

Each fuse word is exposed as its own text file holding a hex value,
usually with a 0x prefix.
"""

from __future__ import annotations

from version_service.sources.base import BaseSource, IdentifierField


class OtpFileSource(BaseSource):
    """Reads CFG0/CFG1 from the per-word fsl_otp pseudo files."""

    name = "otp"
    description = "fsl_otp sysfs files (HW_OCOTP_CFG0 / HW_OCOTP_CFG1)"

    def path_for(self, field: IdentifierField) -> str:
        if field is IdentifierField.CFG0:
            return self.config.otp_cfg0_path
        return self.config.otp_cfg1_path

    def read(self, field: IdentifierField) -> str:
        """
        Read a fuse word.

        The value is trimmed, a leading 0x/0X is removed and the result is
        lowercased. Content is not validated here; only I/O failures raise.
        """
        path = self.path_for(field)
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise self.fail(field, f"failed to read {path}: {e}") from e

        # Undecodable bytes become U+FFFD and are rejected later by parse_hex
        content = raw.decode("ascii", errors="replace").strip()
        if content[:2].lower() == "0x":
            content = content[2:]

        self.logger.debug(f"Read {field.name}={content!r} from {path}")
        return content.lower()
