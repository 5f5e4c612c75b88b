from __future__ import annotations

from typing import Iterable

from zeroed.scheduling.interval import Interval
from zeroed.scheduling.models import FreeGap

# Shorter gaps are not worth offering as a slot.
MIN_GAP_MINUTES = 30


def find_free_gaps(
    busy: Iterable[Interval],
    work_start: int,
    work_end: int,
    buffer_minutes: int,
) -> list[FreeGap]:
    """Return the free gaps of one working day in chronological order.

    Every busy interval is padded by `buffer_minutes` on both sides, so a gap
    never starts or ends closer than the buffer to a commitment. Overlapping or
    touching busy intervals merge through the sweep cursor.
    """
    if work_end <= work_start:
        return []

    padded = [
        expanded
        for interval in busy
        if (expanded := interval.padded(buffer_minutes, work_start, work_end)) is not None
    ]
    padded.sort(key=lambda interval: interval.start)

    gaps: list[FreeGap] = []
    cursor = work_start
    for interval in padded:
        if interval.start > cursor and interval.start - cursor >= MIN_GAP_MINUTES:
            gaps.append(FreeGap(cursor, interval.start))
        cursor = max(cursor, interval.end)

    if cursor < work_end and work_end - cursor >= MIN_GAP_MINUTES:
        gaps.append(FreeGap(cursor, work_end))

    return gaps
