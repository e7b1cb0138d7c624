from enum import Enum
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CanonicalTier(str, Enum):
    FULLY_LEGAL = "Fully Legal"
    RESTRICTED = "Restricted"
    LIMITED = "Limited"
    PROHIBITED = "Prohibited"


class RawStateInfo(BaseModel):
    """One state's entry in the state-directory dataset (camelCase on disk)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    legal_status: Optional[str] = None
    regulatory_classification: Optional[str] = None
    summary: Optional[str] = None
    permit_required: Optional[Any] = None
    permit_threshold_gpd: Optional[Any] = None
    indoor_use_allowed: Optional[Any] = None
    outdoor_use_allowed: Optional[Any] = None
    approved_uses: Optional[Any] = None
    key_restrictions: Optional[List[str]] = None
    governing_code: Optional[str] = None
    primary_agency: Optional[str] = None
    agency_contact: Optional[str] = None
    agency_phone: Optional[str] = None
    government_website: Optional[str] = None


class StateDirectory(BaseModel):
    metadata: Dict[str, Any] = {}
    states: Dict[str, RawStateInfo] = {}


class DirectoryRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    state: str
    status: CanonicalTier
    status_recognized: bool
    description: Optional[str] = None
    details: Optional[str] = None
    full_summary: Optional[str] = None
    permit_required: Optional[Any] = None
    permit_threshold_gpd: Optional[Any] = None
    indoor_use_allowed: Optional[Any] = None
    outdoor_use_allowed: Optional[Any] = None
    approved_uses: Optional[Any] = None
    key_restrictions: Optional[List[str]] = None
    governing_code: Optional[str] = None
    primary_agency: Optional[str] = None
    agency_contact: Optional[str] = None
    agency_phone: Optional[str] = None
    government_website: Optional[str] = None


class DirectoryStats(BaseModel):
    total: int
    breakdown: Dict[str, int]
