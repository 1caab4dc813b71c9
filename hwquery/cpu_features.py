"""CPU vendor and feature parsing helpers."""

from __future__ import annotations

import platform
import re
from enum import Enum
from typing import Iterable, Union

_U32_MAX = 0xFFFFFFFF
_UNSIGNED_RE = re.compile(r"\+?[0-9]+")


class CPUVendor(Enum):
    """Known CPU vendors; unknown vendors are represented by a plain string."""

    INTEL = "Intel"
    AMD = "AMD"
    ARM = "ARM"
    APPLE = "Apple"

    def __str__(self) -> str:
        return self.value


_FEATURE_LABELS = {
    "SSE41": "SSE4.1",
    "SSE42": "SSE4.2",
}


class CPUFeature(Enum):
    """CPU instruction-set extensions; unknown ones are a plain string."""

    AVX = "AVX"
    AVX2 = "AVX2"
    AVX512 = "AVX512"
    SSE = "SSE"
    SSE2 = "SSE2"
    SSE3 = "SSE3"
    SSE41 = "SSE41"
    SSE42 = "SSE42"
    FMA = "FMA"
    AES = "AES"
    SHA = "SHA"
    BMI1 = "BMI1"
    BMI2 = "BMI2"
    RDRAND = "RDRAND"
    RDSEED = "RDSEED"
    POPCNT = "POPCNT"
    LZCNT = "LZCNT"
    MOVBE = "MOVBE"
    PREFETCHWT1 = "PREFETCHWT1"
    CLFLUSHOPT = "CLFLUSHOPT"
    CLWB = "CLWB"
    XSAVE = "XSAVE"
    XSAVEOPT = "XSAVEOPT"
    XSAVEC = "XSAVEC"
    XSAVES = "XSAVES"
    FSGSBASE = "FSGSBASE"
    RDTSCP = "RDTSCP"
    F16C = "F16C"

    def __str__(self) -> str:
        return _FEATURE_LABELS.get(self.value, self.value)


VendorLike = Union[CPUVendor, str]
FeatureLike = Union[CPUFeature, str]

_LINUX_FLAGS = {
    "sse": CPUFeature.SSE,
    "sse2": CPUFeature.SSE2,
    "sse3": CPUFeature.SSE3,
    "sse4_1": CPUFeature.SSE41,
    "sse4_2": CPUFeature.SSE42,
    "avx": CPUFeature.AVX,
    "avx2": CPUFeature.AVX2,
    "avx512f": CPUFeature.AVX512,
    "fma": CPUFeature.FMA,
    "aes": CPUFeature.AES,
    "sha_ni": CPUFeature.SHA,
    "bmi1": CPUFeature.BMI1,
    "bmi2": CPUFeature.BMI2,
    "rdrand": CPUFeature.RDRAND,
    "rdseed": CPUFeature.RDSEED,
    "popcnt": CPUFeature.POPCNT,
    "lzcnt": CPUFeature.LZCNT,
}


def parse_vendor(brand: str) -> VendorLike:
    """Vendor named in a CPU brand string, or the brand itself if unknown."""
    lower = brand.lower()
    for needle, vendor in (
        ("intel", CPUVendor.INTEL),
        ("amd", CPUVendor.AMD),
        ("arm", CPUVendor.ARM),
        ("apple", CPUVendor.APPLE),
    ):
        if needle in lower:
            return vendor
    return brand


def extract_model_name(brand: str) -> str:
    """Brand string without the trailing ``@ frequency`` part."""
    return brand.split("@", 1)[0].strip()


def _parse_u32(text: str) -> int | None:
    if not _UNSIGNED_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U32_MAX else None


def cpuinfo_value(cpuinfo: str | None, key: str) -> str | None:
    """Value of the first /proc/cpuinfo line whose key is exactly ``key``."""
    if cpuinfo is None:
        return None
    for line in cpuinfo.splitlines():
        parts = line.split(":")
        if len(parts) < 2:
            continue
        if parts[0].strip() == key:
            return parts[1].strip()
    return None


def parse_cpuinfo_flags(cpuinfo: str | None) -> list[CPUFeature]:
    """Known features listed on the first ``flags`` line of /proc/cpuinfo."""
    if cpuinfo is None:
        return []
    for line in cpuinfo.splitlines():
        if not line.startswith("flags"):
            continue
        parts = line.split(":")
        if len(parts) < 2:
            continue
        return [_LINUX_FLAGS[flag] for flag in parts[1].split() if flag in _LINUX_FLAGS]
    return []


def count_physical_cores(cpuinfo: str | None) -> int | None:
    """Number of distinct ``core id`` values, or None when none are listed."""
    if cpuinfo is None:
        return None
    core_ids = set()
    for line in cpuinfo.splitlines():
        if not line.startswith("core id"):
            continue
        parts = line.split(":")
        if len(parts) < 2:
            continue
        core_id = _parse_u32(parts[1].strip())
        if core_id is not None:
            core_ids.add(core_id)
    return len(core_ids) or None


def parse_cache_size(text: str | None) -> int | None:
    """Cache size in KB from sysfs text such as ``32K``."""
    if text is None:
        return None
    return _parse_u32(text.strip().rstrip("K"))


def filter_vulnerabilities(entries: Iterable[tuple[str, str]]) -> list[str]:
    """``name: status`` for vulnerabilities that are neither absent nor mitigated."""
    found = []
    for name, status in entries:
        status = status.strip()
        if status.startswith("Not affected") or status.startswith("Mitigation"):
            continue
        found.append(f"{name}: {status}")
    return found


def detect_architecture() -> str:
    """Normalised name of the machine architecture."""
    machine = platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        return "x86_64"
    if machine in ("aarch64", "arm64"):
        return "aarch64"
    if machine.startswith("arm"):
        return "arm"
    return machine