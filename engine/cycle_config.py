"""Immutable per-cycle configuration snapshot."""
from __future__ import annotations

from dataclasses import dataclass

from core.constants.timing import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_SHOW_DURATION_MS,
    MAX_DURATION_MS,
    MIN_DURATION_MS,
)


@dataclass(frozen=True)
class CycleConfig:
    """Durations and options read once when a cycle starts.

    Later edits to the configurator inputs do not reach a running cycle
    because the driver only ever holds this frozen copy.
    """

    show_duration_ms: int = DEFAULT_SHOW_DURATION_MS
    interval_ms: int = DEFAULT_INTERVAL_MS
    pause_media_on_show: bool = False

    def __post_init__(self) -> None:
        for field_name in ("show_duration_ms", "interval_ms"):
            value = getattr(self, field_name)
            # bool is an int subclass; True is not a duration.
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{field_name} must be an integer, got {value!r}")
            if not MIN_DURATION_MS <= value <= MAX_DURATION_MS:
                raise ValueError(
                    f"{field_name} must be between {MIN_DURATION_MS} and {MAX_DURATION_MS} ms, got {value}"
                )
        object.__setattr__(self, "pause_media_on_show", bool(self.pause_media_on_show))

    @property
    def iteration_ms(self) -> int:
        """Minimum wall time of one full iteration."""
        return self.interval_ms + self.show_duration_ms
