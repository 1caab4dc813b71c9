"""Detection of ARM-based boards and systems."""

from __future__ import annotations

import os
import platform
import subprocess
import sys
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

_DEVICE_TREE_MODEL = Path("/proc/device-tree/model")
_CPUINFO = Path("/proc/cpuinfo")
_MEMINFO = Path("/proc/meminfo")
_THERMAL_ZONE0 = Path("/sys/class/thermal/thermal_zone0/temp")

_SYSTEM_LABELS = {
    "RaspberryPi": "Raspberry Pi",
    "NVIDIAJetson": "NVIDIA Jetson",
    "AppleSilicon": "Apple Silicon",
    "QualcommSnapdragon": "Qualcomm Snapdragon",
    "MediaTekDimensity": "MediaTek Dimensity",
    "SamsungExynos": "Samsung Exynos",
    "HiSiliconKirin": "HiSilicon Kirin",
    "AmazonGraviton": "Amazon Graviton",
    "AmpereAltra": "Ampere Altra",
    "Unknown": "Unknown",
}


class ARMSystemType(Enum):
    """Family of an ARM-based system."""

    RASPBERRY_PI = "RaspberryPi"
    NVIDIA_JETSON = "NVIDIAJetson"
    APPLE_SILICON = "AppleSilicon"
    QUALCOMM_SNAPDRAGON = "QualcommSnapdragon"
    MEDIATEK_DIMENSITY = "MediaTekDimensity"
    SAMSUNG_EXYNOS = "SamsungExynos"
    HISILICON_KIRIN = "HiSiliconKirin"
    AMAZON_GRAVITON = "AmazonGraviton"
    AMPERE_ALTRA = "AmpereAltra"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return _SYSTEM_LABELS[self.value]


@dataclass
class PowerInfo:
    """Power consumption and thermal readings of a board."""

    power_consumption: float | None = None
    cpu_temperature: float | None = None
    gpu_temperature: float | None = None
    throttling: bool = False
    voltage: float | None = None


@dataclass
class ARMHardwareInfo:
    """Description of an ARM-based board or system."""

    system_type: ARMSystemType
    board_model: str
    cpu_architecture: str
    cpu_cores: int
    board_revision: str | None = None
    serial_number: str | None = None
    gpu_info: str | None = None
    acceleration_features: list[str] = field(default_factory=list)
    ml_capabilities: dict[str, str] = field(default_factory=dict)
    memory_mb: int | None = None
    interfaces: list[str] = field(default_factory=list)
    power_info: PowerInfo | None = None

    @classmethod
    def detect(cls) -> "ARMHardwareInfo | None":
        """Detect ARM hardware; returns None on other architectures."""
        if _cpu_architecture() != "aarch64":
            return None
        for detector in (
            _detect_raspberry_pi,
            _detect_nvidia_jetson,
            _detect_apple_silicon,
        ):
            info = detector()
            if info is not None:
                return info
        return None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["system_type"] = self.system_type.value
        return data


def cpuinfo_field(cpuinfo: str | None, key: str) -> str | None:
    """Value of the first cpuinfo line starting with ``key``."""
    if cpuinfo is None:
        return None
    line = next((ln for ln in cpuinfo.splitlines() if ln.startswith(key)), None)
    if line is None:
        return None
    parts = line.split(":")
    if len(parts) < 2:
        return None
    return parts[1].strip()


def parse_meminfo_total_mb(meminfo: str | None) -> int | None:
    """Total memory in MB from /proc/meminfo text."""
    if meminfo is None:
        return None
    for line in meminfo.splitlines():
        if not line.startswith("MemTotal:"):
            continue
        tokens = line.split()
        if len(tokens) < 2:
            continue
        try:
            return int(tokens[1]) // 1024
        except ValueError:
            continue
    return None


def jetson_model_name(model: str) -> str | None:
    """Marketing name of a Jetson board from its device-tree model string."""
    lower = model.lower()
    if "jetson" not in lower and "tegra" not in lower:
        return None
    if "nano" in lower:
        return "NVIDIA Jetson Nano"
    if "xavier" in lower:
        return "NVIDIA Jetson Xavier NX" if "nx" in lower else "NVIDIA Jetson AGX Xavier"
    if "orin" in lower:
        if "nx" in lower:
            return "NVIDIA Jetson Orin NX"
        if "nano" in lower:
            return "NVIDIA Jetson Orin Nano"
        return "NVIDIA Jetson AGX Orin"
    return "NVIDIA Jetson"


def jetson_acceleration_features(model: str) -> list[str]:
    features = ["CUDA", "TensorRT"]
    if "Orin" in model:
        features += ["Ampere GPU", "NVENC/NVDEC"]
    elif "Xavier" in model:
        features += ["Volta GPU", "Deep Learning Accelerator"]
    return features


def jetson_ml_capabilities(model: str) -> dict[str, str]:
    capabilities = {
        "cuda_support": "true",
        "tensorrt_support": "true",
        "deep_learning_accelerator": "true",
    }
    if "Orin" in model:
        capabilities["inference_performance"] = "Very High"
        capabilities["training_support"] = "Yes"
    elif "Xavier" in model:
        capabilities["inference_performance"] = "High"
        capabilities["training_support"] = "Limited"
    return capabilities


def _pi_acceleration_features() -> list[str]:
    return ["VideoCore GPU", "Hardware Video Decode"]


def _pi_ml_capabilities() -> dict[str, str]:
    return {"cpu_inference": "true", "frameworks": "TensorFlow Lite, PyTorch"}


def _pi_interfaces() -> list[str]:
    return ["GPIO", "I2C", "SPI", "UART"]


def _jetson_interfaces() -> list[str]:
    return [
        "USB",
        "Ethernet",
        "WiFi",
        "GPIO",
        "I2C",
        "SPI",
        "UART",
        "CSI Camera",
        "HDMI",
    ]


def _pi_power_info() -> PowerInfo:
    text = _read_text(_THERMAL_ZONE0)
    cpu_temp = None
    if text is not None:
        try:
            cpu_temp = float(text.strip()) / 1000.0
        except ValueError:
            cpu_temp = None
    return PowerInfo(cpu_temperature=cpu_temp)


def _raspberry_pi(board_model: str, cpuinfo: str | None, meminfo: str | None) -> ARMHardwareInfo:
    return ARMHardwareInfo(
        system_type=ARMSystemType.RASPBERRY_PI,
        board_model=board_model,
        board_revision=cpuinfo_field(cpuinfo, "Revision"),
        serial_number=cpuinfo_field(cpuinfo, "Serial"),
        cpu_architecture=_cpu_architecture(),
        cpu_cores=_cpu_cores(),
        gpu_info="VideoCore GPU",
        acceleration_features=_pi_acceleration_features(),
        ml_capabilities=_pi_ml_capabilities(),
        memory_mb=parse_meminfo_total_mb(meminfo),
        interfaces=_pi_interfaces(),
        power_info=_pi_power_info(),
    )


def raspberry_pi_from_model(
    model: str, cpuinfo: str | None, meminfo: str | None
) -> ARMHardwareInfo | None:
    """Raspberry Pi description from its device-tree model string."""
    if "raspberry pi" not in model.lower():
        return None
    info = _raspberry_pi(model.rstrip("\0"), cpuinfo, meminfo)
    if "Pi 5" in model:
        info.acceleration_features.append("VideoCore VII GPU")
        info.ml_capabilities["inference_performance"] = "High (ARM Cortex-A76)"
    elif "Pi 4" in model:
        info.acceleration_features.append("VideoCore VI GPU")
        info.ml_capabilities["inference_performance"] = "Medium (ARM Cortex-A72)"
    return info


def raspberry_pi_from_cpuinfo(cpuinfo: str, meminfo: str | None) -> ARMHardwareInfo | None:
    """Raspberry Pi description from /proc/cpuinfo text."""
    if "BCM" not in cpuinfo or "Raspberry Pi" not in cpuinfo:
        return None
    for line in cpuinfo.splitlines():
        if line.startswith("Model"):
            parts = line.split(":")
            board = parts[1] if len(parts) > 1 else "Unknown"
            return _raspberry_pi(board.strip(), cpuinfo, meminfo)
    return None


def _jetson_from_model(model: str, meminfo: str | None) -> ARMHardwareInfo | None:
    name = jetson_model_name(model)
    if name is None:
        return None
    return ARMHardwareInfo(
        system_type=ARMSystemType.NVIDIA_JETSON,
        board_model=name,
        cpu_architecture=_cpu_architecture(),
        cpu_cores=_cpu_cores(),
        gpu_info="NVIDIA GPU with CUDA support",
        acceleration_features=jetson_acceleration_features(name),
        ml_capabilities=jetson_ml_capabilities(name),
        memory_mb=parse_meminfo_total_mb(meminfo),
        interfaces=_jetson_interfaces(),
    )


def _jetson_from_nvidia_smi(output: str, meminfo: str | None) -> ARMHardwareInfo | None:
    if "Tegra" not in output and "Jetson" not in output:
        return None
    return ARMHardwareInfo(
        system_type=ARMSystemType.NVIDIA_JETSON,
        board_model="NVIDIA Jetson (detected via nvidia-smi)",
        cpu_architecture=_cpu_architecture(),
        cpu_cores=_cpu_cores(),
        gpu_info=output.strip(),
        acceleration_features=["CUDA", "TensorRT"],
        ml_capabilities={"cuda_support": "true", "tensorrt_support": "true"},
        memory_mb=parse_meminfo_total_mb(meminfo),
        interfaces=["USB", "Ethernet", "WiFi"],
    )


def apple_silicon_from_brand(brand: str, meminfo: str | None) -> ARMHardwareInfo | None:
    """Apple Silicon description from a CPU brand string."""
    if "Apple M" not in brand:
        return None
    chip = brand.strip()
    return ARMHardwareInfo(
        system_type=ARMSystemType.APPLE_SILICON,
        board_model=f"Apple Silicon ({chip})",
        cpu_architecture="ARM64",
        cpu_cores=_cpu_cores(),
        gpu_info="Apple GPU",
        acceleration_features=["Apple Neural Engine", "Metal", "AMX"],
        ml_capabilities={
            "neural_engine": "true",
            "core_ml": "true",
            "metal_performance_shaders": "true",
        },
        memory_mb=parse_meminfo_total_mb(meminfo),
        interfaces=["Thunderbolt", "USB-C", "WiFi"],
    )


def _detect_raspberry_pi() -> ARMHardwareInfo | None:
    cpuinfo = _read_text(_CPUINFO)
    meminfo = _read_text(_MEMINFO)
    model = _read_text(_DEVICE_TREE_MODEL)
    if model is not None:
        info = raspberry_pi_from_model(model, cpuinfo, meminfo)
        if info is not None:
            return info
    if cpuinfo is not None:
        return raspberry_pi_from_cpuinfo(cpuinfo, meminfo)
    return None


def _detect_nvidia_jetson() -> ARMHardwareInfo | None:
    meminfo = _read_text(_MEMINFO)
    model = _read_text(_DEVICE_TREE_MODEL)
    if model is not None:
        info = _jetson_from_model(model, meminfo)
        if info is not None:
            return info
    output = _run(["nvidia-smi", "-L"])
    if output is not None:
        return _jetson_from_nvidia_smi(output, meminfo)
    return None


def _detect_apple_silicon() -> ARMHardwareInfo | None:
    if sys.platform != "darwin":
        return None
    brand = _run(["sysctl", "-n", "machdep.cpu.brand_string"], require_success=False)
    if brand is None:
        return None
    return apple_silicon_from_brand(brand, _read_text(_MEMINFO))


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(errors="replace")
    except OSError:
        return None


def _run(args: list[str], require_success: bool = True) -> str | None:
    try:
        result = subprocess.run(args, capture_output=True, check=False)
    except OSError:
        return None
    if require_success and result.returncode != 0:
        return None
    return result.stdout.decode("utf-8", errors="replace")


def _cpu_architecture() -> str:
    machine = platform.machine().lower()
    if machine in ("arm64", "aarch64"):
        return "aarch64"
    if machine in ("amd64", "x86_64"):
        return "x86_64"
    return machine


def _cpu_cores() -> int:
    return os.cpu_count() or 1