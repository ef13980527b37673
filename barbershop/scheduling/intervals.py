# barbershop/scheduling/intervals.py
"""
Interval arithmetic used when a barber blocks part of a working day.

Intervals are (start, end) tuples in minutes since midnight.
"""

Interval = tuple[int, int]


def normalize_intervals(intervals: list[Interval]) -> list[Interval]:
    """Sort and merge intervals that overlap or touch."""
    if not intervals:
        return []

    ordered = sorted(intervals)
    merged = [ordered[0]]
    for start, end in ordered[1:]:
        last_start, last_end = merged[-1]
        if start <= last_end:
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))

    return merged


def subtract_intervals(base: list[Interval], blocks: list[Interval]) -> list[Interval]:
    """
    Remove blocked spans from availability.

    >>> subtract_intervals([(540, 1080)], [(720, 780)])
    [(540, 720), (780, 1080)]
    """
    result = normalize_intervals(base)

    for block_start, block_end in normalize_intervals(blocks):
        remaining = []
        for start, end in result:
            if block_end <= start or block_start >= end:
                remaining.append((start, end))
                continue
            if block_start > start:
                remaining.append((start, block_start))
            if block_end < end:
                remaining.append((block_end, end))
        result = remaining

    return result
