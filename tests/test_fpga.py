from pathlib import Path

import pytest

from hwquery.fpga import (
    FPGAFamily,
    FPGAInfo,
    FPGAInterface,
    FPGAVendor,
    check_pci_device_for_fpga,
    create_generic_fpga_info,
    identify_fpga_by_ids,
    read_hex_file,
)


def _make_device(root: Path, name: str, vendor: str, device: str, cls: str | None = None) -> Path:
    path = root / name
    path.mkdir()
    (path / "vendor").write_text(vendor + "\n")
    (path / "device").write_text(device + "\n")
    if cls is not None:
        (path / "class").write_text(cls + "\n")
    return path


def test_identify_known_intel_device():
    info = identify_fpga_by_ids(0x1172, 0x09C4)
    assert info.vendor is FPGAVendor.INTEL
    assert info.family is FPGAFamily.INTEL_ARRIA10
    assert info.model == "Arria 10 GX"
    assert info.logic_elements == 1150000
    assert info.dsp_blocks == 1518
    assert info.max_frequency_mhz == 800
    assert info.vendor_id == "0x1172"
    assert info.device_id == "0x09C4"


def test_identify_known_xilinx_device():
    info = identify_fpga_by_ids(0x10EE, 0x9058)
    assert info.vendor is FPGAVendor.XILINX
    assert info.family is FPGAFamily.XILINX_VIRTEX_ULTRASCALE
    assert info.model == "Virtex UltraScale+ VU19P"
    assert info.block_ram_bits == 270000000


def test_identify_unknown_intel_device_has_no_specs():
    info = identify_fpga_by_ids(0x1172, 0xBEEF)
    assert info.vendor is FPGAVendor.INTEL
    assert info.model == "Intel FPGA Device 0xBEEF"
    assert info.family == "Intel Device 0xBEEF"
    assert info.logic_elements is None
    assert info.calculate_ai_performance() == {}
    assert "Intel Quartus Prime" in info.development_tools


def test_identify_microsemi_and_lattice():
    microsemi = identify_fpga_by_ids(0x11F8, 0x0001)
    lattice = identify_fpga_by_ids(0x1204, 0x0002)
    assert microsemi.family is FPGAFamily.MICROSEMI_POLARFIRE
    assert microsemi.development_tools == ["Libero SoC"]
    assert lattice.family is FPGAFamily.LATTICE_ECP5
    assert lattice.development_tools == ["Lattice Diamond", "Lattice Radiant"]


def test_identify_unknown_vendor_returns_none():
    assert identify_fpga_by_ids(0x8086, 0x1234) is None


def test_generic_fpga_info():
    info = create_generic_fpga_info(0xABCD, 0x0042)
    assert info.vendor == "0xABCD"
    assert info.vendor_id == "0xABCD"
    assert info.device_id == "0x0042"
    assert info.family == "Unknown"
    assert info.interface is FPGAInterface.PCIE
    assert info.ml_capabilities == {}
    assert info.development_tools == []


def test_family_display_labels():
    zynq = identify_fpga_by_ids(0x10EE, 0x9038)
    arria = identify_fpga_by_ids(0x1172, 0x09C4)
    assert str(zynq.family) == "Xilinx Zynq UltraScale+"
    assert str(zynq.vendor) == "Xilinx"
    assert str(arria.family) == "Intel Arria 10"
    assert str(arria.vendor) == "Intel"


def test_ai_performance_ratios():
    info = identify_fpga_by_ids(0x1172, 0x1D1C)
    metrics = info.calculate_ai_performance()
    ops = metrics["theoretical_ops_per_second"]
    assert ops == pytest.approx(5760 * 1000 * 1_000_000.0)
    assert metrics["int8_ops_per_second"] == pytest.approx(ops * 4)
    assert metrics["int16_ops_per_second"] == pytest.approx(ops * 2)
    assert metrics["fp32_ops_per_second"] == pytest.approx(ops)
    assert metrics["logic_efficiency_score"] == pytest.approx(2753000 / 1_000_000.0)


def test_ai_performance_logic_only():
    info = FPGAInfo(vendor=FPGAVendor.LATTICE, family="x", model="m", logic_elements=500000)
    metrics = info.calculate_ai_performance()
    assert set(metrics) == {"logic_efficiency_score"}


def test_framework_support_by_vendor():
    intel = identify_fpga_by_ids(0x1172, 0x09C4)
    xilinx = identify_fpga_by_ids(0x10EE, 0x7020)
    generic = create_generic_fpga_info(0x1111, 0x2222)
    assert intel.get_ai_framework_support() == ["Intel OpenVINO", "Intel oneAPI", "OpenCL"]
    assert xilinx.get_ai_framework_support() == [
        "Xilinx Vitis AI",
        "TensorFlow",
        "PyTorch",
        "ONNX",
    ]
    assert generic.get_ai_framework_support() == ["Custom FPGA frameworks"]


def test_to_dict_enum_and_unknown_representation():
    known = identify_fpga_by_ids(0x10EE, 0x7028).to_dict()
    assert known["vendor"] == "Xilinx"
    assert known["family"] == "XilinxKintex7"
    assert known["interface"] == "PCIe"
    generic = create_generic_fpga_info(0x1111, 0x2222).to_dict()
    assert generic["vendor"] == {"Unknown": "0x1111"}
    assert generic["family"] == {"Unknown": "Unknown"}


def test_read_hex_file_parses_prefixed_value(tmp_path):
    path = tmp_path / "vendor"
    path.write_text("0x10ee\n")
    assert read_hex_file(path) == 0x10EE


def test_read_hex_file_invalid_and_missing(tmp_path):
    bad = tmp_path / "bad"
    bad.write_text("zzz")
    assert read_hex_file(bad) is None
    assert read_hex_file(tmp_path / "missing") is None


def test_check_pci_device_known_vendor(tmp_path):
    path = _make_device(tmp_path, "0000:01:00.0", "0x10ee", "0x7034")
    info = check_pci_device_for_fpga(path)
    assert info.family is FPGAFamily.XILINX_VIRTEX7


def test_check_pci_device_by_class(tmp_path):
    path = _make_device(tmp_path, "0000:02:00.0", "0x1234", "0x5678", "0x120000")
    info = check_pci_device_for_fpga(path)
    assert info.vendor_id == "0x1234"
    assert info.device_id == "0x5678"


def test_check_pci_device_not_fpga(tmp_path):
    path = _make_device(tmp_path, "0000:03:00.0", "0x8086", "0x1234", "0x030000")
    assert check_pci_device_for_fpga(path) is None


def test_check_pci_device_missing_files(tmp_path):
    path = tmp_path / "empty"
    path.mkdir()
    assert check_pci_device_for_fpga(path) is None


def test_detect_fpgas_returns_fpga_infos():
    found = FPGAInfo.detect_fpgas()
    assert all(isinstance(item, FPGAInfo) for item in found)
    assert all(item.interface is FPGAInterface.PCIE for item in found)