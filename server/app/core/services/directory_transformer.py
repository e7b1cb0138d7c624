import locale
import logging
from typing import Iterable, Mapping

from ..models.directory import CanonicalTier, DirectoryRecord, DirectoryStats, RawStateInfo
from .status_classifier import classify, is_recognized

logger = logging.getLogger(__name__)

SUMMARY_PREVIEW_CHARS = 150


def configure_collation(locale_name: str = "") -> bool:
    """Set the process collation used when sorting state names.

    An empty name takes the locale from the environment (LC_ALL, LC_COLLATE,
    LANG). Returns False and keeps codepoint order when the locale is missing.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, locale_name)
    except locale.Error as exc:
        logger.warning("Collation locale %r unavailable, sorting by codepoint: %s", locale_name, exc)
        return False
    return True


def _details(info: RawStateInfo):
    if info.key_restrictions:
        return ". ".join(info.key_restrictions)
    if info.summary:
        return info.summary[:SUMMARY_PREVIEW_CHARS] + "..."
    return None


def transform_state(state_name: str, info: RawStateInfo) -> DirectoryRecord:
    return DirectoryRecord(
        state=state_name,
        status=classify(info.legal_status),
        status_recognized=is_recognized(info.legal_status),
        description=info.regulatory_classification or info.legal_status,
        details=_details(info),
        full_summary=info.summary,
        permit_required=info.permit_required,
        permit_threshold_gpd=info.permit_threshold_gpd,
        indoor_use_allowed=info.indoor_use_allowed,
        outdoor_use_allowed=info.outdoor_use_allowed,
        approved_uses=info.approved_uses,
        key_restrictions=info.key_restrictions,
        governing_code=info.governing_code,
        primary_agency=info.primary_agency,
        agency_contact=info.agency_contact,
        agency_phone=info.agency_phone,
        government_website=info.government_website,
    )


def transform(states: Mapping[str, RawStateInfo]) -> list[DirectoryRecord]:
    """Build display records for every state, ordered by state name."""
    records = [transform_state(name, info) for name, info in states.items()]
    records.sort(key=lambda record: locale.strxfrm(record.state))
    return records


def compute_stats(records: Iterable[DirectoryRecord]) -> DirectoryStats:
    breakdown = {tier.value: 0 for tier in CanonicalTier}
    total = 0
    for record in records:
        breakdown[record.status.value] += 1
        total += 1
    return DirectoryStats(total=total, breakdown=breakdown)
