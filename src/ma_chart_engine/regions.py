"""Grouping labels for pins: world region by country code, super-genre by genre text."""
from __future__ import annotations

from typing import Optional

from shared.config.constants import (
    REGION_BY_ISO,
    REGION_OTHER,
    SUPER_GENRE_KEYWORDS,
    SUPER_GENRE_OTHER,
)

__all__ = ["region_for", "to_super_genre"]


def to_super_genre(genre: Optional[str]) -> str:
    text = (genre or "Other").lower()
    for label, keywords in SUPER_GENRE_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return label
    return SUPER_GENRE_OTHER


def region_for(iso: Optional[str]) -> str:
    if not iso:
        return REGION_OTHER
    return REGION_BY_ISO.get(iso.strip().upper(), REGION_OTHER)
