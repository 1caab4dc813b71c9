"""Hardware detection for CPUs, ARM boards and FPGA accelerators, with battery descriptions."""

__version__ = "0.2.1"
__all__ = ["arm", "battery", "cpu", "cpu_features", "errors", "fpga"]