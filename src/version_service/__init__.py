"""
Version Service - OS release and hardware identity publisher for embedded Linux.

Reads /etc/os-release and the i.MX OCOTP unique-ID fuses once at boot and
publishes them as fields of a Redis hash for other processes on the device.
"""

__version__ = "0.3.0"
__author__ = "Sluggisty"

__all__ = ["__version__"]
