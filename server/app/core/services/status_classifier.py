"""Legal-status classification for the state directory.

Raw ``legalStatus`` labels in the dataset are free text. They are matched
exactly (case-sensitive) against the table below; anything else, including a
missing status, falls back to ``CanonicalTier.LIMITED``.
"""

from typing import Optional

from ..models.directory import CanonicalTier

STATUS_TABLE: dict[str, CanonicalTier] = {
    "Legal": CanonicalTier.FULLY_LEGAL,
    "Legal and Regulated": CanonicalTier.FULLY_LEGAL,
    "Regulated and Permitted": CanonicalTier.FULLY_LEGAL,
    "Comprehensive Regulations": CanonicalTier.FULLY_LEGAL,
    "Restricted": CanonicalTier.RESTRICTED,
    "Highly Restricted": CanonicalTier.RESTRICTED,
    "Limited": CanonicalTier.RESTRICTED,
    "Limited/Unclear": CanonicalTier.RESTRICTED,
    "Effectively Prohibited": CanonicalTier.PROHIBITED,
    "No Formal Regulations": CanonicalTier.PROHIBITED,
    "No Specific Regulations": CanonicalTier.PROHIBITED,
}

FALLBACK_TIER = CanonicalTier.LIMITED


def classify(raw_status: Optional[str]) -> CanonicalTier:
    if raw_status is None:
        return FALLBACK_TIER
    return STATUS_TABLE.get(raw_status, FALLBACK_TIER)


def is_recognized(raw_status: Optional[str]) -> bool:
    """True when the status hit the table rather than the fallback."""
    return raw_status is not None and raw_status in STATUS_TABLE
