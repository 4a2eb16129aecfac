# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Decode legacy composite track ids such as ``afro_001``.

Early clients addressed catalog tracks as ``<genre>_<index>`` where index is
1-based within the genre's track list. This table lets the track resolver map
those ids onto real YouTube ids; remove it once stored data no longer carries
composite ids.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogEntry:
    youtube_id: str
    title: str
    artist: str
    genre: str
    duration: str | None = None
    release_year: int | None = None


_LEGACY_ID = re.compile(r"^([a-z]+)_(\d{1,4})$")

LEGACY_CATALOG: dict[str, list[CatalogEntry]] = {
    "afro": [
        CatalogEntry("e-3Awv-wuzs", "Money", "Teni", "Afrobeats & Global Pop", "3:45", 2019),
        CatalogEntry("WcIcVapfqXw", "Essence", "Wizkid", "Afrobeats & Global Pop", "4:09", 2020),
        CatalogEntry("gkhOHuR2pLY", "Last Last", "Burna Boy", "Afrobeats & Global Pop", "2:52", 2022),
    ],
    "pop": [
        CatalogEntry("4NRXx6U8ABQ", "Blinding Lights", "The Weeknd", "Pop", "3:22", 2020),
        CatalogEntry("JGwWNGJdvx8", "Shape of You", "Ed Sheeran", "Pop", "4:23", 2017),
        CatalogEntry("TUVcZfQe-Kw", "Levitating", "Dua Lipa", "Pop", "3:23", 2020),
    ],
    "hiphop": [
        CatalogEntry("tvTRZJ-4EyI", "HUMBLE.", "Kendrick Lamar", "Hip-Hop & Trap", "2:57", 2017),
        CatalogEntry("xpVfcZ0ZcFM", "God's Plan", "Drake", "Hip-Hop & Trap", "3:19", 2018),
        CatalogEntry("6ONRf7h3Mdk", "SICKO MODE", "Travis Scott", "Hip-Hop & Trap", "5:12", 2018),
    ],
}


def is_legacy_id(value: str) -> bool:
    return bool(_LEGACY_ID.match(value))


def decode_legacy_id(value: str) -> CatalogEntry | None:
    """Return the catalog entry for ``<genre>_<index>``, or None if unknown."""
    match = _LEGACY_ID.match(value)
    if not match:
        return None
    genre, index = match.group(1), int(match.group(2))
    entries = LEGACY_CATALOG.get(genre)
    if not entries or index < 1 or index > len(entries):
        return None
    return entries[index - 1]
