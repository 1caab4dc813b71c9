import pytest

from hwquery.cpu import CPUInfo
from hwquery.cpu_features import (
    CPUFeature,
    CPUVendor,
    detect_architecture,
    extract_model_name,
    parse_vendor,
)
from hwquery.errors import SerializationError


@pytest.fixture
def sample():
    return CPUInfo(
        vendor=CPUVendor.INTEL,
        model_name="Intel(R) Core(TM) i7-9700K CPU",
        brand="Intel(R) Core(TM) i7-9700K CPU @ 3.60GHz",
        physical_cores=8,
        logical_cores=8,
        base_frequency=3600,
        max_frequency=4900,
        l1_cache_kb=32,
        l2_cache_kb=256,
        l3_cache_kb=8192,
        features=[CPUFeature.SSE41, CPUFeature.AVX2, "customext"],
        architecture="x86_64",
        core_usage=[1.5, 2.0],
        stepping=13,
        family=6,
        model=158,
        microcode="0xde",
        vulnerabilities=["spectre_v1: Vulnerable"],
    )


def test_has_feature_uses_display_name(sample):
    assert sample.has_feature("sse4.1")
    assert not sample.has_feature("SSE41")


def test_has_feature_case_insensitive(sample):
    assert sample.has_feature("avx2")
    assert sample.has_feature("CUSTOMEXT")
    assert not sample.has_feature("avx512")


def test_to_dict_encodes_enums(sample):
    data = sample.to_dict()
    assert data["vendor"] == "Intel"
    assert data["features"] == ["SSE41", "AVX2", {"Unknown": "customext"}]


def test_round_trip(sample):
    assert CPUInfo.from_dict(sample.to_dict()) == sample


def test_round_trip_unknown_vendor(sample):
    sample.vendor = "Mystery Silicon"
    restored = CPUInfo.from_dict(sample.to_dict())
    assert restored.vendor == "Mystery Silicon"
    assert restored == sample


def test_from_dict_missing_field(sample):
    data = sample.to_dict()
    del data["brand"]
    with pytest.raises(SerializationError):
        CPUInfo.from_dict(data)


def test_from_dict_bad_vendor(sample):
    data = sample.to_dict()
    data["vendor"] = "NotAVendor"
    with pytest.raises(SerializationError):
        CPUInfo.from_dict(data)


def test_from_dict_negative_cores(sample):
    data = sample.to_dict()
    data["physical_cores"] = -1
    with pytest.raises(SerializationError):
        CPUInfo.from_dict(data)


def test_from_dict_not_mapping():
    with pytest.raises(SerializationError):
        CPUInfo.from_dict([1, 2, 3])


def test_from_dict_optional_fields_default_to_none(sample):
    data = sample.to_dict()
    for key in ("temperature", "power_consumption", "stepping", "family", "model", "microcode"):
        data.pop(key)
    restored = CPUInfo.from_dict(data)
    assert restored.stepping is None
    assert restored.microcode is None


def test_query_invariants():
    info = CPUInfo.query()
    assert info.logical_cores >= 1
    assert info.model_name == extract_model_name(info.brand)
    assert info.vendor == parse_vendor(info.brand)
    assert info.architecture == detect_architecture()
    assert all(isinstance(f, (CPUFeature, str)) for f in info.features)


def test_query_round_trip():
    info = CPUInfo.query()
    assert CPUInfo.from_dict(info.to_dict()) == info