# barbershop/scheduling/durations.py
"""
Service duration lookup.

The catalog (Service table) is the source of truth. Bookings created before
the catalog existed only carry a free-text description, so the old
prefix-matching table is kept as a fallback.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

DEFAULT_SERVICE_MINUTES = 30

# checked in order against the trimmed, lower-cased description
LEGACY_SERVICE_PREFIXES = (
    ("barba & cabelo", 60),
    ("cabelo na tesoura", 60),
    ("barba - r$80", 30),
    ("cabelo na máquina", 30),
)

LEGACY_SERVICE_DURATIONS = {
    "Barba": 30,
    "Barba & Cabelo": 60,
    "Cabelo na tesoura": 60,
    "Cabelo na máquina": 30,
}


def legacy_duration(description: Optional[str], default: int = DEFAULT_SERVICE_MINUTES) -> int:
    if not description:
        return default

    normalized = description.strip().lower()
    for prefix, minutes in LEGACY_SERVICE_PREFIXES:
        if normalized.startswith(prefix):
            return minutes

    return LEGACY_SERVICE_DURATIONS.get(description, default)


@dataclass
class ServiceCatalog:
    """Duration lookup by catalog id or service name, falling back to the legacy table."""

    by_id: dict[int, int] = field(default_factory=dict)
    by_name: dict[str, int] = field(default_factory=dict)
    default_minutes: int = DEFAULT_SERVICE_MINUTES

    def __post_init__(self):
        self.by_name = {name.strip().lower(): minutes for name, minutes in self.by_name.items()}

    def duration_for(self, service: Union[int, str, None], service_id: Optional[int] = None) -> int:
        if service_id is not None and service_id in self.by_id:
            return self.by_id[service_id]

        if isinstance(service, int):
            return self.by_id.get(service, self.default_minutes)

        if service is None:
            return self.default_minutes

        key = service.strip()
        if key.isdigit() and int(key) in self.by_id:
            return self.by_id[int(key)]
        if key.lower() in self.by_name:
            return self.by_name[key.lower()]

        return legacy_duration(service, self.default_minutes)
