"""Detection and description of FPGA accelerators."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union

_PCI_DEVICES = Path("/sys/bus/pci/devices")
_FPGA_CLASS_CODES = (0x120000, 0x058000)
_HEX_RE = re.compile(r"[+]?[0-9a-fA-F]+")
_U32_MAX = 0xFFFFFFFF


class FPGAVendor(Enum):
    """Known FPGA vendors; unknown vendors are represented by a plain string."""

    INTEL = "Intel"
    XILINX = "Xilinx"
    MICROSEMI = "Microsemi"
    LATTICE = "Lattice"
    ALTERA = "Altera"

    def __str__(self) -> str:
        return self.value


_FAMILY_LABELS = {
    "IntelArria10": "Intel Arria 10",
    "IntelStratix10": "Intel Stratix 10",
    "IntelCyclone5": "Intel Cyclone V",
    "IntelAgilex": "Intel Agilex",
    "XilinxKintex7": "Xilinx Kintex-7",
    "XilinxVirtex7": "Xilinx Virtex-7",
    "XilinxZynq7000": "Xilinx Zynq-7000",
    "XilinxZynqUltraScale": "Xilinx Zynq UltraScale+",
    "XilinxKintexUltraScale": "Xilinx Kintex UltraScale+",
    "XilinxVirtexUltraScale": "Xilinx Virtex UltraScale+",
    "XilinxVersal": "Xilinx Versal",
    "MicrosemiPolarFire": "Microsemi PolarFire",
    "LatticeECP5": "Lattice ECP5",
}


class FPGAFamily(Enum):
    """Known FPGA families; unknown families are represented by a plain string."""

    INTEL_ARRIA10 = "IntelArria10"
    INTEL_STRATIX10 = "IntelStratix10"
    INTEL_CYCLONE5 = "IntelCyclone5"
    INTEL_AGILEX = "IntelAgilex"
    XILINX_KINTEX7 = "XilinxKintex7"
    XILINX_VIRTEX7 = "XilinxVirtex7"
    XILINX_ZYNQ7000 = "XilinxZynq7000"
    XILINX_ZYNQ_ULTRASCALE = "XilinxZynqUltraScale"
    XILINX_KINTEX_ULTRASCALE = "XilinxKintexUltraScale"
    XILINX_VIRTEX_ULTRASCALE = "XilinxVirtexUltraScale"
    XILINX_VERSAL = "XilinxVersal"
    MICROSEMI_POLARFIRE = "MicrosemiPolarFire"
    LATTICE_ECP5 = "LatticeECP5"

    def __str__(self) -> str:
        return _FAMILY_LABELS[self.value]


class FPGAInterface(Enum):
    """How an FPGA is attached; unknown interfaces are a plain string."""

    PCIE = "PCIe"
    USB = "USB"
    ETHERNET = "Ethernet"
    SPI = "SPI"
    I2C = "I2C"
    JTAG = "JTAG"
    EMBEDDED = "Embedded"

    def __str__(self) -> str:
        return self.value


VendorLike = Union[FPGAVendor, str]
FamilyLike = Union[FPGAFamily, str]
InterfaceLike = Union[FPGAInterface, str]


def _enum_to_data(value: Enum | str) -> Any:
    if isinstance(value, Enum):
        return value.value
    return {"Unknown": value}


@dataclass
class FPGAInfo:
    """An FPGA accelerator and its capabilities."""

    vendor: VendorLike
    family: FamilyLike
    model: str
    interface: InterfaceLike = FPGAInterface.PCIE
    device_id: str | None = None
    vendor_id: str | None = None
    logic_elements: int | None = None
    block_ram_bits: int | None = None
    dsp_blocks: int | None = None
    max_frequency_mhz: int | None = None
    power_consumption: float | None = None
    ml_capabilities: dict[str, str] = field(default_factory=dict)
    development_tools: list[str] = field(default_factory=list)
    current_config: str | None = None
    driver_version: str | None = None
    temperature: float | None = None

    @classmethod
    def detect_fpgas(cls) -> list["FPGAInfo"]:
        """Detect FPGA accelerators present in the system."""
        fpgas: list[FPGAInfo] = []
        fpgas.extend(_detect_pcie_fpgas())
        return fpgas

    def calculate_ai_performance(self) -> dict[str, float]:
        """Theoretical AI throughput metrics derived from the device specs."""
        metrics: dict[str, float] = {}
        if self.dsp_blocks is not None and self.max_frequency_mhz is not None:
            ops = float(self.dsp_blocks) * float(self.max_frequency_mhz) * 1_000_000.0
            metrics["theoretical_ops_per_second"] = ops
            metrics["int8_ops_per_second"] = ops * 4.0
            metrics["int16_ops_per_second"] = ops * 2.0
            metrics["fp32_ops_per_second"] = ops
        if self.logic_elements is not None:
            metrics["logic_efficiency_score"] = float(self.logic_elements) / 1_000_000.0
        return metrics

    def get_ai_framework_support(self) -> list[str]:
        """AI frameworks usable with this FPGA's vendor toolchain."""
        if self.vendor is FPGAVendor.INTEL:
            return ["Intel OpenVINO", "Intel oneAPI", "OpenCL"]
        if self.vendor is FPGAVendor.XILINX:
            return ["Xilinx Vitis AI", "TensorFlow", "PyTorch", "ONNX"]
        return ["Custom FPGA frameworks"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "vendor": _enum_to_data(self.vendor),
            "family": _enum_to_data(self.family),
            "model": self.model,
            "device_id": self.device_id,
            "vendor_id": self.vendor_id,
            "interface": _enum_to_data(self.interface),
            "logic_elements": self.logic_elements,
            "block_ram_bits": self.block_ram_bits,
            "dsp_blocks": self.dsp_blocks,
            "max_frequency_mhz": self.max_frequency_mhz,
            "power_consumption": self.power_consumption,
            "ml_capabilities": dict(self.ml_capabilities),
            "development_tools": list(self.development_tools),
            "current_config": self.current_config,
            "driver_version": self.driver_version,
            "temperature": self.temperature,
        }


# (family, model, (logic elements, block RAM bits, DSP blocks, max MHz))
_INTEL_DEVICES: dict[int, tuple[FPGAFamily, str, tuple[int, int, int, int]]] = {
    0x09C4: (FPGAFamily.INTEL_ARRIA10, "Arria 10 GX", (1150000, 53248000, 1518, 800)),
    0x09C5: (FPGAFamily.INTEL_ARRIA10, "Arria 10 GT", (1150000, 65536000, 1518, 800)),
    0x1D1C: (FPGAFamily.INTEL_STRATIX10, "Stratix 10 GX", (2753000, 229376000, 5760, 1000)),
    0x1D1D: (FPGAFamily.INTEL_STRATIX10, "Stratix 10 TX", (2753000, 229376000, 5760, 1000)),
    0x4350: (FPGAFamily.INTEL_AGILEX, "Agilex F-Series", (2700000, 270000000, 5760, 1100)),
}

_XILINX_DEVICES: dict[int, tuple[FPGAFamily, str, tuple[int, int, int, int]]] = {
    0x7028: (FPGAFamily.XILINX_KINTEX7, "Kintex-7 K325T", (326080, 16020000, 840, 464)),
    0x7034: (FPGAFamily.XILINX_VIRTEX7, "Virtex-7 V485T", (485760, 37080000, 2800, 600)),
    0x7020: (FPGAFamily.XILINX_ZYNQ7000, "Zynq-7000 Z020", (85000, 4900000, 220, 766)),
    0x9038: (
        FPGAFamily.XILINX_ZYNQ_ULTRASCALE,
        "Zynq UltraScale+ ZU19EG",
        (1143000, 75900000, 1968, 850),
    ),
    0x906C: (
        FPGAFamily.XILINX_KINTEX_ULTRASCALE,
        "Kintex UltraScale+ KU15P",
        (1451000, 75900000, 1968, 925),
    ),
    0x9058: (
        FPGAFamily.XILINX_VIRTEX_ULTRASCALE,
        "Virtex UltraScale+ VU19P",
        (8938000, 270000000, 12288, 750),
    ),
    0x5008: (FPGAFamily.XILINX_VERSAL, "Versal Prime VP1202", (899000, 57600000, 1968, 1300)),
}


def _hex4(value: int) -> str:
    return f"0x{value:04X}"


def _positive(value: int) -> int | None:
    return value if value > 0 else None


def _intel_ml_capabilities() -> dict[str, str]:
    return {
        "openCL_support": "true",
        "oneAPI_support": "true",
        "dsp_optimization": "true",
    }


def _intel_tools() -> list[str]:
    return ["Intel Quartus Prime", "Intel OpenCL SDK", "Intel oneAPI"]


def _xilinx_ml_capabilities() -> dict[str, str]:
    return {
        "vitis_ai_support": "true",
        "dpu_acceleration": "true",
        "hls_support": "true",
    }


def _xilinx_tools() -> list[str]:
    return ["Xilinx Vivado", "Xilinx Vitis", "Xilinx Vitis AI"]


def _known_vendor_fpga(
    vendor: FPGAVendor,
    vendor_name: str,
    vendor_id: str,
    table: dict[int, tuple[FPGAFamily, str, tuple[int, int, int, int]]],
    device_id: int,
    ml_capabilities: dict[str, str],
    tools: list[str],
) -> FPGAInfo:
    entry = table.get(device_id)
    if entry is None:
        return FPGAInfo(
            vendor=vendor,
            family=f"{vendor_name} Device {_hex4(device_id)}",
            model=f"{vendor_name} FPGA Device {_hex4(device_id)}",
            device_id=_hex4(device_id),
            vendor_id=vendor_id,
            interface=FPGAInterface.PCIE,
            ml_capabilities=ml_capabilities,
            development_tools=tools,
        )
    family, model, (logic, bram, dsp, freq) = entry
    return FPGAInfo(
        vendor=vendor,
        family=family,
        model=model,
        device_id=_hex4(device_id),
        vendor_id=vendor_id,
        interface=FPGAInterface.PCIE,
        logic_elements=_positive(logic),
        block_ram_bits=_positive(bram),
        dsp_blocks=_positive(dsp),
        max_frequency_mhz=_positive(freq),
        ml_capabilities=ml_capabilities,
        development_tools=tools,
    )


def _intel_fpga(device_id: int) -> FPGAInfo:
    return _known_vendor_fpga(
        FPGAVendor.INTEL,
        "Intel",
        "0x1172",
        _INTEL_DEVICES,
        device_id,
        _intel_ml_capabilities(),
        _intel_tools(),
    )


def _xilinx_fpga(device_id: int) -> FPGAInfo:
    return _known_vendor_fpga(
        FPGAVendor.XILINX,
        "Xilinx",
        "0x10EE",
        _XILINX_DEVICES,
        device_id,
        _xilinx_ml_capabilities(),
        _xilinx_tools(),
    )


def _microsemi_fpga(device_id: int) -> FPGAInfo:
    return FPGAInfo(
        vendor=FPGAVendor.MICROSEMI,
        family=FPGAFamily.MICROSEMI_POLARFIRE,
        model=f"Microsemi Device {_hex4(device_id)}",
        device_id=_hex4(device_id),
        vendor_id="0x11F8",
        interface=FPGAInterface.PCIE,
        ml_capabilities={"low_power_inference": "true"},
        development_tools=["Libero SoC"],
    )


def _lattice_fpga(device_id: int) -> FPGAInfo:
    return FPGAInfo(
        vendor=FPGAVendor.LATTICE,
        family=FPGAFamily.LATTICE_ECP5,
        model=f"Lattice Device {_hex4(device_id)}",
        device_id=_hex4(device_id),
        vendor_id="0x1204",
        interface=FPGAInterface.PCIE,
        ml_capabilities={"edge_ai_inference": "true", "low_power": "true"},
        development_tools=["Lattice Diamond", "Lattice Radiant"],
    )


_VENDOR_BUILDERS = {
    0x1172: _intel_fpga,
    0x10EE: _xilinx_fpga,
    0x11F8: _microsemi_fpga,
    0x1204: _lattice_fpga,
}


def identify_fpga_by_ids(vendor_id: int, device_id: int) -> FPGAInfo | None:
    """Describe an FPGA from its PCI vendor and device IDs, if the vendor is known."""
    builder = _VENDOR_BUILDERS.get(vendor_id)
    if builder is None:
        return None
    return builder(device_id)


def create_generic_fpga_info(vendor_id: int, device_id: int) -> FPGAInfo:
    """A minimal description for an FPGA-class device of an unknown vendor."""
    return FPGAInfo(
        vendor=_hex4(vendor_id),
        family="Unknown",
        model=f"FPGA Device {_hex4(vendor_id)}:{_hex4(device_id)}",
        device_id=_hex4(device_id),
        vendor_id=_hex4(vendor_id),
        interface=FPGAInterface.PCIE,
    )


def read_hex_file(path: str | Path) -> int | None:
    """Parse a sysfs-style hexadecimal value from a file; None when unreadable."""
    try:
        text = Path(path).read_text(errors="replace")
    except OSError:
        return None
    digits = text.strip()
    while digits.startswith("0x"):
        digits = digits[2:]
    if not _HEX_RE.fullmatch(digits):
        return None
    value = int(digits, 16)
    if value > _U32_MAX:
        return None
    return value


def check_pci_device_for_fpga(device_path: str | Path) -> FPGAInfo | None:
    """Inspect one sysfs PCI device directory and describe it if it is an FPGA."""
    device_path = Path(device_path)
    vendor = read_hex_file(device_path / "vendor")
    device = read_hex_file(device_path / "device")
    if vendor is None or device is None:
        return None
    info = identify_fpga_by_ids(vendor, device)
    if info is not None:
        return info
    device_class = read_hex_file(device_path / "class")
    if device_class in _FPGA_CLASS_CODES:
        return create_generic_fpga_info(vendor, device)
    return None


def _detect_pcie_fpgas() -> list[FPGAInfo]:
    if not sys.platform.startswith("linux"):
        return []
    try:
        entries = sorted(_PCI_DEVICES.iterdir())
    except OSError:
        return []
    return [info for entry in entries if (info := check_pci_device_for_fpga(entry))]