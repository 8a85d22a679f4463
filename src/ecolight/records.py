"""The persisted result of one analysis session."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from .readings import decode_trace, encode_trace


@dataclass(frozen=True)
class PersistedRequestRecord:
    """Immutable record written once, when a session finalizes."""

    plant_name: str
    average_lux: float
    duration_seconds: int
    timestamp: datetime
    recommendation: str
    readings_trace: tuple[float, ...] = ()
    is_suitable: bool | None = None
    min_light_level: float | None = None
    max_light_level: float | None = None
    image_ref: str | None = None
    id: int | None = None

    def with_id(self, record_id: int) -> PersistedRequestRecord:
        return replace(self, id=record_id)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON storage (trace as comma-separated text)."""
        return {
            "id": self.id,
            "plant_name": self.plant_name,
            "average_lux": self.average_lux,
            "min_light_level": self.min_light_level,
            "max_light_level": self.max_light_level,
            "duration_seconds": self.duration_seconds,
            "readings_trace": encode_trace(self.readings_trace),
            "timestamp": self.timestamp.isoformat(),
            "image_ref": self.image_ref,
            "is_suitable": self.is_suitable,
            "recommendation": self.recommendation,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PersistedRequestRecord:
        """Deserialize from JSON."""
        return cls(
            id=data.get("id"),
            plant_name=data["plant_name"],
            average_lux=float(data["average_lux"]),
            min_light_level=data.get("min_light_level"),
            max_light_level=data.get("max_light_level"),
            duration_seconds=int(data.get("duration_seconds", 0)),
            readings_trace=tuple(decode_trace(data.get("readings_trace", ""))),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            image_ref=data.get("image_ref"),
            is_suitable=data.get("is_suitable"),
            recommendation=data.get("recommendation", ""),
        )
