"""
Text utilities for product name matching.

Scanned delivery notes and the catalog disagree on case, spacing and
separators; everything is compared in a normalized lowercase form.
"""

import re
from typing import Optional

_TOKEN_SPLIT = re.compile(r"[\s\-_]+")


def normalize_product_name(name: Optional[str]) -> str:
    """
    Normalize a product name for comparison.

    - "  Bio Bananen " → "bio bananen"
    - None → ""
    """
    if not name:
        return ""
    return name.strip().lower()


def tokenize(name: Optional[str]) -> list[str]:
    """
    Split a name into lowercase tokens on whitespace, hyphen and underscore runs.

    "Rode-paprika_XL" → ["rode", "paprika", "xl"]
    """
    normalized = normalize_product_name(name)
    return [t for t in _TOKEN_SPLIT.split(normalized) if t]


def clean_supplier_name(name: Optional[str], max_length: int = 255) -> Optional[str]:
    """
    Clean supplier name for storage.

    Returns None for empty/whitespace-only strings, truncates long names.
    """
    if not name:
        return None

    name = name.strip()

    if not name:
        return None

    if len(name) > max_length:
        name = name[:max_length]

    return name
