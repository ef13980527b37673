# barbershop/scheduling/generator.py

from typing import Iterable

from .times import TimeWindow

DEFAULT_STEP_MINUTES = 30


def generate_candidates(
    windows: Iterable[TimeWindow],
    service_minutes: int,
    step_minutes: int = DEFAULT_STEP_MINUTES,
) -> list[int]:
    """
    Candidate start times whose whole service fits inside a window.

    Each window is walked on its own from its start. Results keep window
    order and are not deduplicated, so overlapping windows yield repeats.
    """
    if service_minutes <= 0:
        raise ValueError(f"service_minutes must be positive, got {service_minutes}")
    if step_minutes <= 0:
        raise ValueError(f"step_minutes must be positive, got {step_minutes}")

    candidates = []
    for window in windows:
        cursor = window.start
        while cursor + service_minutes <= window.end:
            candidates.append(cursor)
            cursor += step_minutes

    return candidates
