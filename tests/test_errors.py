import pytest

from hwquery.errors import (
    DeviceNotFoundError,
    GPUDriverError,
    HardwareIOError,
    HardwareQueryError,
    InvalidConfigurationError,
    MonitoringError,
    PermissionDeniedError,
    PlatformNotSupportedError,
    PowerManagementError,
    SerializationError,
    SystemInfoUnavailableError,
    ThermalError,
    UnknownHardwareError,
    VirtualizationError,
)


@pytest.mark.parametrize(
    "cls, prefix",
    [
        (SystemInfoUnavailableError, "System information not available"),
        (DeviceNotFoundError, "Hardware device not found"),
        (PlatformNotSupportedError, "Platform not supported"),
        (PermissionDeniedError, "Permission denied"),
        (HardwareIOError, "I/O error"),
        (SerializationError, "Serialization error"),
        (GPUDriverError, "GPU driver error"),
        (InvalidConfigurationError, "Invalid hardware configuration"),
        (MonitoringError, "Monitoring error"),
        (PowerManagementError, "Power management error"),
        (VirtualizationError, "Virtualization detection error"),
        (ThermalError, "Thermal management error"),
        (UnknownHardwareError, "Unknown error"),
    ],
)
def test_message_format(cls, prefix):
    err = cls("details here")
    assert str(err) == f"{prefix}: details here"
    assert err.message == "details here"


def test_all_derive_from_base():
    text = "No battery detected"
    errors = [
        SystemInfoUnavailableError(text),
        DeviceNotFoundError(text),
        PlatformNotSupportedError(text),
        PermissionDeniedError(text),
        HardwareIOError(text),
        SerializationError(text),
        GPUDriverError(text),
        InvalidConfigurationError(text),
        MonitoringError(text),
        PowerManagementError(text),
        VirtualizationError(text),
        ThermalError(text),
        UnknownHardwareError(text),
    ]
    assert all(isinstance(err, HardwareQueryError) for err in errors)
    assert [err.message for err in errors] == [text] * len(errors)
    assert str(errors[1]) == "Hardware device not found: No battery detected"


def test_catch_specific_subclass():
    err = PermissionDeniedError("root required")
    assert err.message == "root required"
    assert str(err) == "Permission denied: root required"
    with pytest.raises(HardwareQueryError) as excinfo:
        raise err
    assert isinstance(excinfo.value, PermissionDeniedError)
    assert excinfo.value.message == "root required"


def test_io_error_wraps_os_error():
    cause = OSError("disk gone")
    err = HardwareIOError(cause)
    assert err.message == str(cause)
    assert str(err).startswith("I/O error: ")


def test_subclasses_are_distinct():
    err = ThermalError("hot")
    assert not isinstance(err, MonitoringError)
    assert str(err) == "Thermal management error: hot"