#!/usr/bin/env python3
"""
Free-text keyword processing for tutor search.

Turns text such as "guru matematika jakarta 150k-200k" into canonical
subject tags, area names and a price range.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

# keyword -> canonical subject tag (Indonesian and English keywords)
SUBJECT_KEYWORDS = {
    'matematika': 'Matematika',
    'math': 'Matematika',
    'fisika': 'Fisika',
    'physics': 'Fisika',
    'kimia': 'Kimia',
    'chemistry': 'Kimia',
    'biologi': 'Biologi',
    'biology': 'Biologi',
    'bahasa': 'Bahasa Indonesia',
    'english': 'Bahasa Inggris',
    'inggris': 'Bahasa Inggris',
    'ekonomi': 'Ekonomi',
    'economics': 'Ekonomi',
    'programming': 'Programming',
    'coding': 'Programming',
    'arab': 'Bahasa Arab',
    'arabic': 'Bahasa Arab',
}

LOCATION_KEYWORDS = {
    'jakarta': ['Jakarta Pusat', 'Jakarta Selatan', 'Jakarta Utara', 'Jakarta Timur', 'Jakarta Barat'],
    'bekasi': ['Bekasi Timur', 'Bekasi Barat', 'Bekasi Selatan', 'Bekasi Utara'],
    'tangerang': ['Tangerang', 'Tangerang Selatan'],
    'depok': ['Depok'],
    'bogor': ['Bogor'],
}

_PRICE_PATTERN = re.compile(r'(\d+)\s*(k?)\s*-\s*(\d+)\s*(k?)', re.IGNORECASE)

# Shorter tokens produce too many accidental partial matches
_MIN_PARTIAL_LENGTH = 4


@dataclass
class KeywordExtraction:
    original_text: str
    subjects: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    price_range: Optional[Tuple[float, float]] = None

    @property
    def is_empty(self) -> bool:
        return not self.subjects and self.price_range is None


def _append_unique(items: List[str], value: str) -> None:
    if value not in items:
        items.append(value)


def _parse_price(text: str) -> Optional[Tuple[float, float]]:
    match = _PRICE_PATTERN.search(text)
    if not match:
        return None
    low = int(match.group(1)) * (1000 if match.group(2) else 1)
    high = int(match.group(3)) * (1000 if match.group(4) else 1)
    if low > high:
        low, high = high, low
    return float(low), float(high)


def parse_free_text(text: str) -> KeywordExtraction:
    extracted = KeywordExtraction(original_text=text)
    if not text:
        return extracted

    tokens = [t for t in re.split(r'\s+', text.lower()) if t]

    for token in tokens:
        if token in SUBJECT_KEYWORDS:
            _append_unique(extracted.subjects, SUBJECT_KEYWORDS[token])
        elif len(token) >= _MIN_PARTIAL_LENGTH:
            for keyword, subject in SUBJECT_KEYWORDS.items():
                if keyword in token or (len(keyword) >= _MIN_PARTIAL_LENGTH and token in keyword):
                    _append_unique(extracted.subjects, subject)

        for area in LOCATION_KEYWORDS.get(token, []):
            _append_unique(extracted.locations, area)

    extracted.price_range = _parse_price(text)

    logger.debug(
        f"Keyword extraction for {text!r}: subjects={extracted.subjects}, "
        f"locations={extracted.locations}, price_range={extracted.price_range}"
    )
    return extracted
