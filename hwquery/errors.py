"""Exception hierarchy for hardware queries."""

from __future__ import annotations


class HardwareQueryError(Exception):
    """Base class for every error raised while querying hardware."""

    prefix = "Hardware query error"

    def __init__(self, message: object = "") -> None:
        self.message = str(message)
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"


class SystemInfoUnavailableError(HardwareQueryError):
    """System information is not available."""

    prefix = "System information not available"


class DeviceNotFoundError(HardwareQueryError):
    """A hardware device could not be found."""

    prefix = "Hardware device not found"


class PlatformNotSupportedError(HardwareQueryError):
    """The running platform is not supported."""

    prefix = "Platform not supported"


class PermissionDeniedError(HardwareQueryError):
    """Access to hardware information was denied."""

    prefix = "Permission denied"


class HardwareIOError(HardwareQueryError):
    """An I/O operation failed while reading hardware information."""

    prefix = "I/O error"


class SerializationError(HardwareQueryError):
    """Hardware information could not be serialized or deserialized."""

    prefix = "Serialization error"


class GPUDriverError(HardwareQueryError):
    """A GPU driver reported an error."""

    prefix = "GPU driver error"


class InvalidConfigurationError(HardwareQueryError):
    """The hardware configuration is invalid."""

    prefix = "Invalid hardware configuration"


class MonitoringError(HardwareQueryError):
    """Hardware monitoring failed."""

    prefix = "Monitoring error"


class PowerManagementError(HardwareQueryError):
    """Power management failed."""

    prefix = "Power management error"


class VirtualizationError(HardwareQueryError):
    """Virtualization detection failed."""

    prefix = "Virtualization detection error"


class ThermalError(HardwareQueryError):
    """Thermal management failed."""

    prefix = "Thermal management error"


class UnknownHardwareError(HardwareQueryError):
    """An error of unknown origin."""

    prefix = "Unknown error"