"""
Exceptions raised while converting a compose project.

Any ConversionError aborts the whole batch. Files written before the
error stay on disk.
"""

from typing import Optional


class ConversionError(ValueError):
    """Root of all conversion errors."""

    def __init__(self, message: str, service: Optional[str] = None):
        super().__init__(message)
        self.service = service


class DescriptorError(ConversionError):
    """The compose descriptor cannot be used (e.g. it declares no services)."""


class InvalidPortError(ConversionError):
    """A port is not a valid 32-bit container port number."""


class InvalidVolumeError(ConversionError):
    """A volume spec has no host path."""


class UnknownRestartPolicyError(ConversionError):
    """A restart policy has no Kubernetes equivalent."""


class SerializationError(ConversionError):
    """A manifest could not be encoded or written."""
