from enum import Enum
from typing import Optional, List, Any
from pydantic import BaseModel


class JurisdictionTier(str, Enum):
    state = "state"
    county = "county"
    city = "city"


class HierarchyLevel(str, Enum):
    states = "states"
    counties = "counties"
    cities = "cities"


class RegulationType(str, Enum):
    state_code = "state_code"
    county_ordinance = "county_ordinance"
    local_ordinance = "local_ordinance"
    municipal_code = "municipal_code"
    city_ordinance = "city_ordinance"


class StateRow(BaseModel):
    jurisdiction_id: str
    state_code: str
    state_name: Optional[str] = None
    population: Optional[int] = None
    website: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    county_count: int = 0
    city_count: int = 0
    state_regulations: Optional[str] = None
    state_allowance: Optional[str] = None
    active_program_count: int = 0


class CountyRow(BaseModel):
    jurisdiction_id: str
    jurisdiction_name: Optional[str] = None
    county_name: Optional[str] = None
    state_code: str
    state_name: Optional[str] = None
    population: Optional[int] = None
    website: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    city_count: int = 0
    total_city_population: int = 0
    local_regulations: Optional[str] = None
    county_allowance: Optional[str] = None
    base_permit_fee: Optional[float] = None
    processing_time_days: Optional[int] = None
    application_url: Optional[str] = None
    active_program_count: int = 0


class CityRow(BaseModel):
    jurisdiction_id: str
    city_name: Optional[str] = None
    county_name: Optional[str] = None
    state_code: str
    state_name: Optional[str] = None
    population: Optional[int] = None
    website: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    local_city_regulations: Optional[str] = None
    city_allowance: Optional[str] = None
    city_use_restrictions: Optional[str] = None
    city_permit_fee: Optional[float] = None
    processing_days: Optional[int] = None
    pro_required: Optional[bool] = None
    incentives: Optional[str] = None
    active_program_count: int = 0
    has_local_rules: bool = False


class HierarchyResponse(BaseModel):
    success: bool = True
    level: str
    parentId: Optional[str] = None
    count: int
    data: List[Any]


class HierarchyErrorResponse(BaseModel):
    success: bool = False
    error: str
    usage: Optional[str] = None
    message: Optional[str] = None
    details: Optional[str] = None
