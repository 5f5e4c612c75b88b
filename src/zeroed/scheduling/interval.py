from __future__ import annotations

from dataclasses import dataclass

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, order=True)
class Interval:
    """Half-open `[start, end)` span in minutes from midnight."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Interval end {self.end} is before start {self.start}")

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: Interval) -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, other: Interval) -> bool:
        return self.start <= other.start and other.end <= self.end

    def padded(self, margin: int, lower: int, upper: int) -> Interval | None:
        """Grow both ends by `margin` and clip to `[lower, upper]`.

        Returns None when nothing of the interval is left inside the bounds.
        """
        start = max(self.start - margin, lower)
        end = min(self.end + margin, upper)
        if end <= start:
            return None
        return Interval(start, end)

    @classmethod
    def from_hhmm(cls, start: str, end: str) -> Interval:
        return cls(parse_hhmm(start), parse_hhmm(end))

    def __str__(self) -> str:
        return f"{format_hhmm(self.start)}-{format_hhmm(self.end)}"


def parse_hhmm(value: str) -> int:
    """Parse `HH:MM` (24h, `24:00` allowed) into minutes from midnight."""
    text = value.strip() if isinstance(value, str) else ""
    hours_str, sep, minutes_str = text.partition(":")
    if not sep or not hours_str.isdigit() or len(minutes_str) != 2 or not minutes_str.isdigit():
        raise ValueError(f"Invalid time `{value}`, expected HH:MM")
    hours = int(hours_str)
    minutes = int(minutes_str)
    if minutes > 59 or hours * 60 + minutes > MINUTES_PER_DAY:
        raise ValueError(f"Invalid time `{value}`, expected HH:MM")
    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise ValueError(f"Minute offset {minutes} is outside a day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
