"""
Pytest fixtures and configuration for Version Service tests.

Provides sample release files, fake OCOTP sysfs/nvmem trees and a
mocked Redis client.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from version_service.config import Config


@pytest.fixture
def sample_os_release_content():
    """Sample content for /etc/os-release file."""
    return """# Generated by the image build
NAME="Deep Librescoot"
VERSION="0.9.2 (stable)"
ID=librescoot
ID_LIKE=poky
VERSION_ID=0.9.2

PRETTY_NAME="Deep Librescoot 0.9.2"
BUILD_ID=20240115-1a2b3c
MALFORMED LINE WITHOUT SEPARATOR
VARIANT=mdb
"""


@pytest.fixture
def sample_nvmem_bytes():
    """Sixteen bytes of an OCOTP bank: lock word, CFG0 at 4, CFG1 at 8, CFG2."""
    return bytes(
        [
            0x00, 0x00, 0x00, 0x00,
            0x4d, 0x3c, 0x2b, 0x1a,
            0x88, 0x77, 0x66, 0x55,
            0xff, 0xff, 0xff, 0xff,
        ]
    )


@pytest.fixture
def device_tree(tmp_path, sample_os_release_content, sample_nvmem_bytes):
    """Fake filesystem with a release file, OTP sysfs files and an nvmem device."""
    release = tmp_path / "os-release"
    release.write_text(sample_os_release_content)

    otp_dir = tmp_path / "fsl_otp"
    otp_dir.mkdir()
    (otp_dir / "HW_OCOTP_CFG0").write_text("0x1a2b3c4d\n")
    (otp_dir / "HW_OCOTP_CFG1").write_text("0x55667788\n")

    nvmem = tmp_path / "nvmem"
    nvmem.write_bytes(sample_nvmem_bytes)

    return tmp_path


@pytest.fixture
def device_config(device_tree: Path) -> Config:
    """Config pointing every input at the fake device tree."""
    return Config(
        redis_addr="127.0.0.1:6379",
        redis_hash="os-release",
        release_path=str(device_tree / "os-release"),
        otp_cfg0_path=str(device_tree / "fsl_otp" / "HW_OCOTP_CFG0"),
        otp_cfg1_path=str(device_tree / "fsl_otp" / "HW_OCOTP_CFG1"),
        nvmem_path=str(device_tree / "nvmem"),
    )


@pytest.fixture
def device_env(device_config: Config) -> dict[str, str]:
    """Environment variables selecting the fake device tree."""
    return {
        "VERSION_SERVICE_RELEASE_PATH": device_config.release_path,
        "VERSION_SERVICE_OTP_CFG0_PATH": device_config.otp_cfg0_path,
        "VERSION_SERVICE_OTP_CFG1_PATH": device_config.otp_cfg1_path,
        "VERSION_SERVICE_NVMEM_PATH": device_config.nvmem_path,
    }


@pytest.fixture
def mock_redis():
    """Redis client double that answers PING and accepts HSET."""
    client = MagicMock()
    client.ping.return_value = True
    client.hset.return_value = 1
    return client


@pytest.fixture
def mock_redis_unreachable():
    """Redis client double whose PING fails with a connection error."""
    import redis

    client = MagicMock()
    client.ping.side_effect = redis.exceptions.ConnectionError("Connection refused")
    return client


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "cli: marks tests that drive the command-line interface")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
