"""Built-in seed catalog.

These payloads are used whenever storage is empty or an input document
omits holds or angles. Seed angles carry fixed ids so defaults are stable.
"""

from __future__ import annotations

from core.types import JsonValue

DEFAULT_HOLDS: tuple[str, ...] = (
    "Anton", "Austin", "Amon", "Asteca", "Avalon", "Avalon Flat", "Avalon SuperFlat",
    "Base 10", "Base 15", "Base Zero", "Boomerang", "Chava", "Circo", "Classica",
    "Concord", "Crack", "Crack Midle", "Crack ending 30", "Crack ending 45",
    "Cuneo", "Cuneo Lungo", "Delta", "Etna", "Flat 80", "Flat 90", "Fratelli",
    "French fries", "Fresco 10", "Fresco 20", "Fresco 30", "Fuji", "Gamma 3",
    "Gamma 3 (Large)", "Gamma 4", "Gamma 4 (30)", "Gamma 4 (Large)",
    "Gamma 4 (40)", "Gobba", "Gradino", "Half Chava", "Half Circo", "Half Lancia",
    "Inca", "Katla", "Lancia", "Lancia Flat", "Leon", "Lipari", "Mago (Large)",
    "Mago - set A", "Mago - set B", 'Mago medium "A"', 'Mago medium "B"',
    "Parapetto 60", "Parapetto 70", "Parapetto 80", "Rampa", "Rampa wide",
    "Rumba High", "Rumba Low", "Salina", "Samba", "Sparo", "Sparo Super Flat",
    "Sparo Flat", "Splash", "Square", "Square Flat", "Square SuperFlat",
    "Tufa", "Ustica", "WI-FI 70", "WI-FI 80",
)


def default_hold_payload() -> list[JsonValue]:
    """Return a fresh copy of the seed hold list."""
    return list(DEFAULT_HOLDS)


def default_angle_payload() -> list[JsonValue]:
    """Return a fresh copy of the seed angle list."""
    return [
        {"id": "seed-angle-1", "hold": "Austin", "value": 28.2, "saw": "main"},
        {"id": "seed-angle-2", "hold": "Avalon Flat", "value": 65.0, "saw": "main"},
        {"id": "seed-angle-3", "hold": "Austin", "value": 65.3, "saw": "main"},
        {"id": "seed-angle-4", "hold": "Avalon SuperFlat", "value": 30.0, "saw": "stefan"},
        {"id": "seed-angle-5", "hold": "Amon", "value": 50.0, "saw": "stefan"},
    ]


def default_document() -> dict[str, JsonValue]:
    """Return the raw document used when storage holds nothing usable."""
    return {
        "holds": default_hold_payload(),
        "angles": default_angle_payload(),
        "holdImages": {},
    }
