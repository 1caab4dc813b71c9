"""Battery state and health information."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping

from hwquery.errors import DeviceNotFoundError, SerializationError

_STATUS_LABELS = {
    "Charging": "Charging",
    "Discharging": "Discharging",
    "Full": "Full",
    "NotCharging": "Not Charging",
    "Unknown": "Unknown",
}


class BatteryStatus(Enum):
    """Charging state of a battery."""

    CHARGING = "Charging"
    DISCHARGING = "Discharging"
    FULL = "Full"
    NOT_CHARGING = "NotCharging"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return _STATUS_LABELS[self.value]


_FLOAT_FIELDS = {
    "health_percent",
    "design_capacity_wh",
    "current_capacity_wh",
    "temperature",
    "voltage",
    "current",
}
_INT_FIELDS = {"time_remaining_minutes", "cycle_count"}
_STR_FIELDS = {"manufacturer", "model", "serial_number"}


@dataclass
class BatteryInfo:
    """Battery charge, status and health details."""

    percentage: float
    status: BatteryStatus
    time_remaining_minutes: int | None = None
    health_percent: float | None = None
    design_capacity_wh: float | None = None
    current_capacity_wh: float | None = None
    cycle_count: int | None = None
    temperature: float | None = None
    voltage: float | None = None
    current: float | None = None
    manufacturer: str | None = None
    model: str | None = None
    serial_number: str | None = None

    @classmethod
    def query(cls) -> "BatteryInfo":
        """Query the system battery; raises when none is detected."""
        raise DeviceNotFoundError("No battery detected")

    def is_charging(self) -> bool:
        return self.status is BatteryStatus.CHARGING

    def is_discharging(self) -> bool:
        return self.status is BatteryStatus.DISCHARGING

    def time_remaining_hours(self) -> float | None:
        """Remaining time in hours, if known."""
        if self.time_remaining_minutes is None:
            return None
        return self.time_remaining_minutes / 60.0

    def wear_percent(self) -> float | None:
        """Capacity lost relative to the design capacity, in percent."""
        design = self.design_capacity_wh
        current = self.current_capacity_wh
        if design is None or current is None or design <= 0.0:
            return None
        return (design - current) / design * 100.0

    def needs_replacement(self) -> bool:
        """True when health is below 80% or, lacking health, wear exceeds 20%."""
        if self.health_percent is not None:
            return self.health_percent < 80.0
        wear = self.wear_percent()
        if wear is not None:
            return wear > 20.0
        return False

    def capacity_wh(self) -> float | None:
        """Current capacity in Wh."""
        return self.current_capacity_wh

    def charge_percent(self) -> float:
        """Charge percentage; same as ``percentage``."""
        return self.percentage

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BatteryInfo":
        """Build from a mapping as produced by ``to_dict``."""
        if not isinstance(data, Mapping):
            raise SerializationError("expected a mapping for BatteryInfo")
        for required in ("percentage", "status"):
            if required not in data:
                raise SerializationError(f"missing field `{required}`")

        percentage = data["percentage"]
        if isinstance(percentage, bool) or not isinstance(percentage, (int, float)):
            raise SerializationError("field `percentage` must be a number")
        try:
            status = BatteryStatus(data["status"])
        except ValueError as exc:
            raise SerializationError(
                f"unknown battery status {data['status']!r}"
            ) from exc

        kwargs: dict[str, Any] = {"percentage": float(percentage), "status": status}
        for name in _FLOAT_FIELDS | _INT_FIELDS | _STR_FIELDS:
            value = data.get(name)
            if value is None:
                kwargs[name] = None
                continue
            if name in _STR_FIELDS:
                if not isinstance(value, str):
                    raise SerializationError(f"field `{name}` must be a string")
                kwargs[name] = value
            elif name in _INT_FIELDS:
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    raise SerializationError(
                        f"field `{name}` must be a non-negative integer"
                    )
                kwargs[name] = value
            else:
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise SerializationError(f"field `{name}` must be a number")
                kwargs[name] = float(value)
        return cls(**kwargs)