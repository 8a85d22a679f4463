"""Light samples collected during a session and their stored trace form."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import numpy as np

TRACE_SEPARATOR = ","


@dataclass(frozen=True)
class Sample:
    """One illuminance sample, stamped with scheduler time."""

    lux: float
    captured_at: float | None = None


class LightReadingBuffer:
    """
    Append-only sample sequence for the session that owns it.

    Only the running session writes to a buffer; the controller serializes
    those writes with its own lock.
    """

    def __init__(self) -> None:
        self._samples: list[Sample] = []

    def append(self, lux: float, captured_at: float | None = None) -> None:
        self._samples.append(Sample(float(lux), captured_at))

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(list(self._samples))

    @property
    def samples(self) -> tuple[Sample, ...]:
        return tuple(self._samples)

    def values(self) -> list[float]:
        """Lux values in capture order."""
        return [s.lux for s in self._samples]

    def mean(self) -> float | None:
        """Arithmetic mean of all samples, or None when empty."""
        if not self._samples:
            return None
        return float(np.mean(self.values()))

    def stats(self) -> dict[str, float]:
        """Min / max / mean / standard deviation of the samples (empty dict if none)."""
        if not self._samples:
            return {}
        arr = np.array(self.values(), dtype=np.float64)
        return {
            "min": float(arr.min()),
            "max": float(arr.max()),
            "mean": float(arr.mean()),
            "std": float(arr.std()),
        }


def encode_trace(values: Iterable[float]) -> str:
    """Serialize lux values as comma-separated decimal text ("" for none)."""
    return TRACE_SEPARATOR.join(repr(float(v)) for v in values)


def decode_trace(text: str | None) -> list[float]:
    """
    Parse comma-separated lux values.

    Blank text yields an empty list. Tokens that do not parse as finite
    numbers are dropped rather than failing the whole trace.
    """
    if not text or not text.strip():
        return []

    values = []
    for token in text.split(TRACE_SEPARATOR):
        token = token.strip()
        if not token:
            continue
        try:
            value = float(token)
        except ValueError:
            continue
        if math.isfinite(value):
            values.append(value)
    return values
