"""Composite jurisdiction identifiers.

Grammar::

    STATE  := {2 letters}_STATE              e.g. CA_STATE
    COUNTY := {2 letters}_COUNTY_{UPPER_SNAKE} e.g. CA_COUNTY_LOS_ANGELES

``decode`` is lenient about what it accepts (a bare state code such as ``CA``
also resolves to the state) but always yields a structured scope.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..models.hierarchy import JurisdictionTier

STATE_MARKER = "STATE"
STATE_SUFFIX = f"_{STATE_MARKER}"
COUNTY_MARKER = "COUNTY"


class InvalidJurisdictionId(ValueError):
    """Raised when a parent id cannot be resolved to a 2-letter state code."""


@dataclass(frozen=True)
class JurisdictionScope:
    state_code: str
    county_name: Optional[str] = None

    @property
    def tier(self) -> JurisdictionTier:
        if self.county_name:
            return JurisdictionTier.county
        return JurisdictionTier.state


def _validated_state_code(candidate: str, parent_id: str) -> str:
    if len(candidate) != 2 or not candidate.isalpha():
        raise InvalidJurisdictionId(f"Cannot resolve a state code from parentId '{parent_id}'")
    return candidate.upper()


def decode(parent_id: str, parent_type: Optional[str] = None) -> JurisdictionScope:
    """Resolve a parent id into the state (and optionally county) it addresses."""
    parent_id = (parent_id or "").strip()
    if not parent_id:
        raise InvalidJurisdictionId("parentId is empty")

    parts = parent_id.split("_")

    # Whole-token match so county names like STATEN_ISLAND stay counties.
    if parent_type == JurisdictionTier.state.value or (len(parts) >= 2 and parts[1] == STATE_MARKER):
        stripped = parent_id.replace(STATE_SUFFIX, "", 1)
        return JurisdictionScope(_validated_state_code(stripped[:2], parent_id))

    if len(parts) >= 3 and parts[1] == COUNTY_MARKER:
        county_name = " ".join(parts[2:]).strip()
        return JurisdictionScope(
            _validated_state_code(parts[0], parent_id),
            county_name or None,
        )

    return JurisdictionScope(_validated_state_code(parent_id[:2], parent_id))


def _county_token(county_name: str) -> str:
    return re.sub(r"\s+", "_", county_name.strip().upper())


def encode(
    tier: JurisdictionTier,
    state_code: str,
    county_name: Optional[str] = None,
) -> str:
    """Build the id used to link to a jurisdiction's listing.

    A city id addresses the county listing that contains the city, so cities
    and their county share an id.
    """
    tier = JurisdictionTier(tier)
    state = state_code.strip().upper()
    if len(state) != 2 or not state.isalpha():
        raise InvalidJurisdictionId(f"Invalid state code '{state_code}'")

    if tier == JurisdictionTier.state:
        return f"{state}{STATE_SUFFIX}"

    if tier == JurisdictionTier.county and not (county_name and county_name.strip()):
        raise InvalidJurisdictionId("County ids require a county name")

    if county_name and county_name.strip():
        return f"{state}_{COUNTY_MARKER}_{_county_token(county_name)}"
    return f"{state}{STATE_SUFFIX}"
