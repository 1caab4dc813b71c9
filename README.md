# hwquery

A library for finding out what hardware a program is running on: the CPU,
ARM boards such as Raspberry Pi, NVIDIA Jetson and Apple Silicon, and FPGA
accelerators on the PCI bus. It also describes batteries and defines a
common error hierarchy.

## Installation

```
pip install hwquery
```

The only runtime dependency is `psutil`.

## CPU

```python
from hwquery.cpu import CPUInfo

cpu = CPUInfo.query()
print(cpu.vendor, cpu.model_name)
print(cpu.physical_cores, "physical,", cpu.logical_cores, "logical cores")
print("AVX2:", cpu.has_feature("avx2"))

data = cpu.to_dict()
same = CPUInfo.from_dict(data)
```

`CPUInfo.query()` reads `/proc/cpuinfo` and `/sys` on Linux, runs `sysctl`
on macOS and relies on `psutil` on Windows. Where a value cannot be read it
falls back to a default: 3000 MHz maximum frequency, and 32, 256 and 8192 KB
for the L1, L2 and L3 caches. Physical cores fall back to half the logical
count. `temperature` and `power_consumption` are always `None`.

`has_feature()` compares the feature's display name case-insensitively, so
`"sse4.1"` matches `CPUFeature.SSE41`. `from_dict()` raises
`SerializationError` for missing or malformed fields.

Vendors and features are `CPUVendor` and `CPUFeature` members; values that
are not known are kept as plain strings.

The helpers in `hwquery.cpu_features` work on text you already have, such
as the contents of `/proc/cpuinfo`:

```python
from hwquery.cpu_features import (
    count_physical_cores,
    cpuinfo_value,
    extract_model_name,
    parse_cache_size,
    parse_cpuinfo_flags,
    parse_vendor,
)

parse_vendor("Intel(R) Core(TM) i7-9700K CPU @ 3.60GHz")        # CPUVendor.INTEL
extract_model_name("Intel(R) Core(TM) i7-9700K CPU @ 3.60GHz")  # "Intel(R) Core(TM) i7-9700K CPU"
parse_cache_size("32K")                                          # 32

with open("/proc/cpuinfo") as f:
    text = f.read()
parse_cpuinfo_flags(text)
count_physical_cores(text)
cpuinfo_value(text, "model name")
```

`filter_vulnerabilities()` turns `(name, status)` pairs into `"name: status"`
strings, dropping those that are "Not affected" or mitigated, and
`detect_architecture()` returns a normalised machine name such as `x86_64`
or `aarch64`.

## ARM boards

```python
from hwquery.arm import ARMHardwareInfo

board = ARMHardwareInfo.detect()
if board is not None:
    print(board.system_type, board.board_model)
    print(board.to_dict())
```

`detect()` returns `None` unless the machine is ARM64. It recognises
Raspberry Pi boards (from the device-tree model or `/proc/cpuinfo`), NVIDIA
Jetson boards (from the device-tree model or `nvidia-smi -L`) and Apple
Silicon (from `sysctl` on macOS). Other ARM systems are not identified.

The parsing steps are available on their own: `raspberry_pi_from_model()`,
`raspberry_pi_from_cpuinfo()`, `apple_silicon_from_brand()`,
`jetson_model_name()`, `jetson_acceleration_features()`,
`jetson_ml_capabilities()`, `cpuinfo_field()` and `parse_meminfo_total_mb()`.

## FPGA accelerators

```python
from hwquery.fpga import FPGAInfo, identify_fpga_by_ids

for fpga in FPGAInfo.detect_fpgas():
    print(fpga.vendor, fpga.family, fpga.model)
    print(fpga.calculate_ai_performance())
    print(fpga.get_ai_framework_support())

kintex = identify_fpga_by_ids(0x10EE, 0x7028)
print(kintex.family, kintex.dsp_blocks, kintex.max_frequency_mhz)
```

`detect_fpgas()` scans `/sys/bus/pci/devices` on Linux and returns an empty
list elsewhere. Devices from Intel, Xilinx, Microsemi and Lattice are
recognised by PCI vendor ID; other devices with an FPGA-like PCI class are
reported through `create_generic_fpga_info()`. `check_pci_device_for_fpga()`
inspects a single sysfs device directory, and `read_hex_file()` reads a
hexadecimal sysfs value.

## Battery

```python
from hwquery.battery import BatteryInfo, BatteryStatus

battery = BatteryInfo(
    percentage=76.0,
    status=BatteryStatus.DISCHARGING,
    design_capacity_wh=50.0,
    current_capacity_wh=38.0,
)
battery.wear_percent()        # 24.0
battery.needs_replacement()   # True
BatteryInfo.from_dict(battery.to_dict())
```

`BatteryInfo.query()` does not read a battery: it always raises
`DeviceNotFoundError`. `BatteryInfo` is useful for describing battery data
obtained some other way.

## Errors

Every error is a subclass of `hwquery.errors.HardwareQueryError`, for
example `DeviceNotFoundError`, `SystemInfoUnavailableError` or
`SerializationError`. `str()` of an error gives a prefix for its kind
followed by the message, e.g. `"Hardware device not found: No battery detected"`.

## What it does not do

hwquery does not detect GPUs, memory, storage, network interfaces, PCI or
USB devices in general, NPUs or TPUs, and it does no continuous monitoring
or power management. It has no command-line program.

## Running the tests

```
pip install -e .[test]
pytest
```