"""CPU specifications gathered from the running system."""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import psutil

from hwquery.cpu_features import (
    CPUFeature,
    CPUVendor,
    FeatureLike,
    VendorLike,
    count_physical_cores,
    cpuinfo_value,
    detect_architecture,
    extract_model_name,
    filter_vulnerabilities,
    parse_cache_size,
    parse_cpuinfo_flags,
    parse_vendor,
)
from hwquery.errors import SerializationError, SystemInfoUnavailableError

_CPUINFO = Path("/proc/cpuinfo")
_CPU0 = Path("/sys/devices/system/cpu/cpu0")
_SCALING_MAX_FREQ = _CPU0 / "cpufreq" / "scaling_max_freq"
_CACHE_DIR = _CPU0 / "cache"
_VULNERABILITIES_DIR = Path("/sys/devices/system/cpu/vulnerabilities")

_DEFAULT_MAX_FREQUENCY = 3000
_DEFAULT_L1_KB = 32
_DEFAULT_L2_KB = 256
_DEFAULT_L3_KB = 8192

_DEFAULT_FEATURES = (
    CPUFeature.SSE,
    CPUFeature.SSE2,
    CPUFeature.SSE3,
    CPUFeature.SSE41,
    CPUFeature.SSE42,
    CPUFeature.AVX,
    CPUFeature.AVX2,
)

_MACOS_FEATURE_SYSCTLS = (
    ("hw.optional.sse", CPUFeature.SSE),
    ("hw.optional.sse2", CPUFeature.SSE2),
    ("hw.optional.sse3", CPUFeature.SSE3),
    ("hw.optional.sse4_1", CPUFeature.SSE41),
    ("hw.optional.sse4_2", CPUFeature.SSE42),
    ("hw.optional.avx1_0", CPUFeature.AVX),
    ("hw.optional.avx2_0", CPUFeature.AVX2),
    ("hw.optional.aes", CPUFeature.AES),
)


@dataclass
class _PlatformDetails:
    physical_cores: int
    max_frequency: int = _DEFAULT_MAX_FREQUENCY
    l1_cache_kb: int = _DEFAULT_L1_KB
    l2_cache_kb: int = _DEFAULT_L2_KB
    l3_cache_kb: int = _DEFAULT_L3_KB
    features: list[FeatureLike] = field(default_factory=lambda: list(_DEFAULT_FEATURES))
    stepping: int | None = None
    family: int | None = None
    model: int | None = None
    microcode: str | None = None
    vulnerabilities: list[str] = field(default_factory=list)


@dataclass
class CPUInfo:
    """CPU identity, topology, caches, features and current load."""

    vendor: VendorLike
    model_name: str
    brand: str
    physical_cores: int
    logical_cores: int
    base_frequency: int
    max_frequency: int
    l1_cache_kb: int
    l2_cache_kb: int
    l3_cache_kb: int
    features: list[FeatureLike] = field(default_factory=list)
    architecture: str = ""
    core_usage: list[float] = field(default_factory=list)
    temperature: float | None = None
    power_consumption: float | None = None
    stepping: int | None = None
    family: int | None = None
    model: int | None = None
    microcode: str | None = None
    vulnerabilities: list[str] = field(default_factory=list)

    @classmethod
    def query(cls) -> "CPUInfo":
        """Query CPU information from the running system."""
        logical = psutil.cpu_count(logical=True) or 0
        if logical <= 0:
            raise SystemInfoUnavailableError("No CPU information available")

        if sys.platform.startswith("linux"):
            cpuinfo = _read_text(_CPUINFO)
            details = _linux_details(cpuinfo, logical)
            brand = cpuinfo_value(cpuinfo, "model name") or _generic_brand()
        elif sys.platform == "darwin":
            details = _macos_details(logical)
            brand = _sysctl("machdep.cpu.brand_string") or _generic_brand()
        elif sys.platform == "win32":
            details = _windows_details(logical)
            brand = _generic_brand()
        else:
            details = _PlatformDetails(physical_cores=logical // 2)
            brand = _generic_brand()

        return cls(
            vendor=parse_vendor(brand),
            model_name=extract_model_name(brand),
            brand=brand,
            physical_cores=details.physical_cores,
            logical_cores=logical,
            base_frequency=_current_frequency(),
            max_frequency=details.max_frequency,
            l1_cache_kb=details.l1_cache_kb,
            l2_cache_kb=details.l2_cache_kb,
            l3_cache_kb=details.l3_cache_kb,
            features=details.features,
            architecture=detect_architecture(),
            core_usage=_core_usage(),
            temperature=None,
            power_consumption=None,
            stepping=details.stepping,
            family=details.family,
            model=details.model,
            microcode=details.microcode,
            vulnerabilities=details.vulnerabilities,
        )

    def has_feature(self, feature: str) -> bool:
        """True if a feature with this display name (case-insensitive) is present."""
        wanted = feature.lower()
        return any(str(f).lower() == wanted for f in self.features)

    def to_dict(self) -> dict[str, Any]:
        return {
            "vendor": _enum_to_data(self.vendor),
            "model_name": self.model_name,
            "brand": self.brand,
            "physical_cores": self.physical_cores,
            "logical_cores": self.logical_cores,
            "base_frequency": self.base_frequency,
            "max_frequency": self.max_frequency,
            "l1_cache_kb": self.l1_cache_kb,
            "l2_cache_kb": self.l2_cache_kb,
            "l3_cache_kb": self.l3_cache_kb,
            "features": [_enum_to_data(f) for f in self.features],
            "architecture": self.architecture,
            "core_usage": list(self.core_usage),
            "temperature": self.temperature,
            "power_consumption": self.power_consumption,
            "stepping": self.stepping,
            "family": self.family,
            "model": self.model,
            "microcode": self.microcode,
            "vulnerabilities": list(self.vulnerabilities),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CPUInfo":
        """Build from a mapping as produced by ``to_dict``."""
        if not isinstance(data, Mapping):
            raise SerializationError("expected a mapping for CPUInfo")

        def required(name: str) -> Any:
            if name not in data:
                raise SerializationError(f"missing field `{name}`")
            return data[name]

        features = required("features")
        if not isinstance(features, list):
            raise SerializationError("field `features` must be a list")
        core_usage = required("core_usage")
        if not isinstance(core_usage, list):
            raise SerializationError("field `core_usage` must be a list")
        vulnerabilities = required("vulnerabilities")
        if not isinstance(vulnerabilities, list) or not all(
            isinstance(v, str) for v in vulnerabilities
        ):
            raise SerializationError("field `vulnerabilities` must be a list of strings")

        return cls(
            vendor=_enum_from_data(CPUVendor, required("vendor"), "vendor"),
            model_name=_as_str(required("model_name"), "model_name"),
            brand=_as_str(required("brand"), "brand"),
            physical_cores=_as_u32(required("physical_cores"), "physical_cores"),
            logical_cores=_as_u32(required("logical_cores"), "logical_cores"),
            base_frequency=_as_u32(required("base_frequency"), "base_frequency"),
            max_frequency=_as_u32(required("max_frequency"), "max_frequency"),
            l1_cache_kb=_as_u32(required("l1_cache_kb"), "l1_cache_kb"),
            l2_cache_kb=_as_u32(required("l2_cache_kb"), "l2_cache_kb"),
            l3_cache_kb=_as_u32(required("l3_cache_kb"), "l3_cache_kb"),
            features=[_enum_from_data(CPUFeature, f, "features") for f in features],
            architecture=_as_str(required("architecture"), "architecture"),
            core_usage=[_as_float(u, "core_usage") for u in core_usage],
            temperature=_optional(data.get("temperature"), _as_float, "temperature"),
            power_consumption=_optional(
                data.get("power_consumption"), _as_float, "power_consumption"
            ),
            stepping=_optional(data.get("stepping"), _as_u32, "stepping"),
            family=_optional(data.get("family"), _as_u32, "family"),
            model=_optional(data.get("model"), _as_u32, "model"),
            microcode=_optional(data.get("microcode"), _as_str, "microcode"),
            vulnerabilities=list(vulnerabilities),
        )


def _enum_to_data(value: Enum | str) -> Any:
    if isinstance(value, Enum):
        return value.value
    return {"Unknown": value}


def _enum_from_data(enum_cls: type[Enum], value: Any, name: str) -> Any:
    if isinstance(value, str):
        try:
            return enum_cls(value)
        except ValueError as exc:
            raise SerializationError(f"unknown variant {value!r} in `{name}`") from exc
    if (
        isinstance(value, Mapping)
        and set(value) == {"Unknown"}
        and isinstance(value["Unknown"], str)
    ):
        return value["Unknown"]
    raise SerializationError(f"invalid value for `{name}`")


def _as_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise SerializationError(f"field `{name}` must be a string")
    return value


def _as_u32(value: Any, name: str) -> int:
    if (
        isinstance(value, bool)
        or not isinstance(value, int)
        or not 0 <= value <= 0xFFFFFFFF
    ):
        raise SerializationError(f"field `{name}` must be an unsigned 32-bit integer")
    return value


def _as_float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SerializationError(f"field `{name}` must be a number")
    return float(value)


def _optional(value: Any, convert: Any, name: str) -> Any:
    return None if value is None else convert(value, name)


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(errors="replace")
    except OSError:
        return None


def _parse_u32(text: str | None) -> int | None:
    if text is None:
        return None
    stripped = text.strip()
    if not stripped.isdigit():
        return None
    value = int(stripped)
    return value if value <= 0xFFFFFFFF else None


def _generic_brand() -> str:
    import platform

    return platform.processor() or ""


def _current_frequency() -> int:
    try:
        freq = psutil.cpu_freq()
    except (OSError, NotImplementedError, RuntimeError):
        return 0
    if freq is None:
        return 0
    return max(int(freq.current), 0)


def _core_usage() -> list[float]:
    try:
        return [float(u) for u in psutil.cpu_percent(interval=None, percpu=True)]
    except (OSError, RuntimeError):
        return []


def _linux_max_frequency(cpuinfo: str | None) -> int:
    mhz = cpuinfo_value(cpuinfo, "cpu MHz")
    if mhz is not None:
        try:
            return int(float(mhz))
        except ValueError:
            pass
    khz = _parse_u32(_read_text(_SCALING_MAX_FREQ))
    if khz is not None:
        return khz // 1000
    return _DEFAULT_MAX_FREQUENCY


def _linux_cache(index: int, default: int) -> int:
    size = parse_cache_size(_read_text(_CACHE_DIR / f"index{index}" / "size"))
    return default if size is None else size


def _linux_vulnerabilities() -> list[str]:
    try:
        entries = sorted(_VULNERABILITIES_DIR.iterdir())
    except OSError:
        return []
    pairs = []
    for entry in entries:
        status = _read_text(entry)
        if status is not None:
            pairs.append((entry.name, status))
    return filter_vulnerabilities(pairs)


def _linux_details(cpuinfo: str | None, logical: int) -> _PlatformDetails:
    physical = count_physical_cores(cpuinfo)
    microcode = cpuinfo_value(cpuinfo, "microcode")
    return _PlatformDetails(
        physical_cores=logical // 2 if physical is None else physical,
        max_frequency=_linux_max_frequency(cpuinfo),
        l1_cache_kb=_linux_cache(0, _DEFAULT_L1_KB),
        l2_cache_kb=_linux_cache(1, _DEFAULT_L2_KB),
        l3_cache_kb=_linux_cache(2, _DEFAULT_L3_KB),
        features=list(parse_cpuinfo_flags(cpuinfo)),
        stepping=_parse_u32(cpuinfo_value(cpuinfo, "stepping")),
        family=_parse_u32(cpuinfo_value(cpuinfo, "cpu family")),
        model=_parse_u32(cpuinfo_value(cpuinfo, "model")),
        microcode=microcode,
        vulnerabilities=_linux_vulnerabilities(),
    )


def _sysctl_checked(name: str) -> str | None:
    """Run ``sysctl -n name``; raises if sysctl cannot be started."""
    try:
        result = subprocess.run(["sysctl", "-n", name], capture_output=True, check=False)
    except OSError as exc:
        raise SystemInfoUnavailableError(f"sysctl failed: {exc}") from exc
    if result.returncode != 0:
        return None
    return result.stdout.decode("utf-8", errors="replace").strip()


def _sysctl(name: str) -> str | None:
    try:
        return _sysctl_checked(name)
    except SystemInfoUnavailableError:
        return None


def _macos_cache(name: str, default: int) -> int:
    size = _parse_u32(_sysctl_checked(name))
    return default if size is None else size // 1024


def _macos_details(logical: int) -> _PlatformDetails:
    physical = _parse_u32(_sysctl_checked("hw.physicalcpu"))
    freq_text = _sysctl_checked("hw.cpufrequency_max")
    max_frequency = _DEFAULT_MAX_FREQUENCY
    if freq_text is not None and freq_text.isdigit():
        max_frequency = int(freq_text) // 1_000_000
    features: list[FeatureLike] = [
        feature
        for name, feature in _MACOS_FEATURE_SYSCTLS
        if _sysctl(name) == "1"
    ]
    return _PlatformDetails(
        physical_cores=logical // 2 if physical is None else physical,
        max_frequency=max_frequency,
        l1_cache_kb=_macos_cache("hw.l1dcachesize", _DEFAULT_L1_KB),
        l2_cache_kb=_macos_cache("hw.l2cachesize", _DEFAULT_L2_KB),
        l3_cache_kb=_macos_cache("hw.l3cachesize", _DEFAULT_L3_KB),
        features=features,
    )


def _windows_details(logical: int) -> _PlatformDetails:
    physical = psutil.cpu_count(logical=False)
    max_frequency = _DEFAULT_MAX_FREQUENCY
    try:
        freq = psutil.cpu_freq()
    except (OSError, NotImplementedError, RuntimeError):
        freq = None
    if freq is not None and freq.max > 0:
        max_frequency = int(freq.max)
    return _PlatformDetails(
        physical_cores=physical if physical else logical // 2,
        max_frequency=max_frequency,
    )