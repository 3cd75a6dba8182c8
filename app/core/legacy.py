# File: app/core/legacy.py
"""Versioned mapping of legacy report values to current taxonomy names.

Early reports stored a short pollution type code ("air", "smell", ...) and a
numeric sector 1-5. Only the submission validator and the display/aggregation
code consult this table; nothing rewrites stored reports.
"""
import re

LEGACY_MAPPING_VERSION = 1

LEGACY_TYPE_NAMES = {
    1: {
        "smell": "Bad Smell / Odor",
        "smoke": "Smoke",
        "noise": "Noise Pollution",
        "water": "Water Pollution",
        "air": "Air Pollution",
        "waste": "Waste / Litter",
        "chemical": "Chemical Pollution",
        "other": "Other",
    },
}

LEGACY_SECTOR_NAMES = {
    1: {1: "Sector 1", 2: "Sector 2", 3: "Sector 3", 4: "Sector 4", 5: "Sector 5"},
}

OTHER_TYPE_NAME = "Other"


def slugify(name: str) -> str:
    """"Bad Smell / Odor" -> "bad_smell__odor" (same rule the form uses for option values)."""
    return re.sub(r"[^a-z0-9_]", "", re.sub(r"\s+", "_", name.lower()))


def legacy_type_name(code: str, version: int = LEGACY_MAPPING_VERSION) -> str | None:
    return LEGACY_TYPE_NAMES[version].get(code)


def legacy_sector_name(index: int, version: int = LEGACY_MAPPING_VERSION) -> str | None:
    return LEGACY_SECTOR_NAMES[version].get(index)


def type_display_name(code: str, active_names: list[str]) -> str:
    """Resolve a stored pollution type code to a display name.

    Order: slug of an active type, then the legacy table, then the raw code.
    """
    for name in active_names:
        if slugify(name) == code:
            return name
    return legacy_type_name(code) or code


def sector_display_name(index: int, active_names: list[str]) -> str:
    """Stored sectors are 1-based positions in the active sectors list (ordered by name)."""
    if 1 <= index <= len(active_names):
        return active_names[index - 1]
    return legacy_sector_name(index) or f"Sector {index}"


def accepted_type_codes(active_names: list[str]) -> set[str]:
    codes = {slugify(name) for name in active_names}
    active = set(active_names)
    for code, name in LEGACY_TYPE_NAMES[LEGACY_MAPPING_VERSION].items():
        if name in active:
            codes.add(code)
    return codes
