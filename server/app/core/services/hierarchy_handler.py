"""Request handling for the jurisdiction hierarchy endpoint.

Each request runs Validate -> Resolve -> Aggregate -> Respond and produces a
single JSON envelope: either the full row list or an error, never a partial
list.
"""

import logging
import traceback
from dataclasses import dataclass
from typing import Any, Optional

from ..models.hierarchy import HierarchyErrorResponse, HierarchyLevel, HierarchyResponse, JurisdictionTier
from .compliance_aggregator import AggregationFailure, ComplianceAggregator
from .jurisdiction_ids import InvalidJurisdictionId, JurisdictionScope, decode

logger = logging.getLogger(__name__)

LEVEL_USAGE = "Valid levels are: states, counties, cities"
PARENT_USAGE = {
    HierarchyLevel.counties: "For counties level, provide parentId (e.g., CA_STATE or CA)",
    HierarchyLevel.cities: "For cities level, provide parentId (state code or county ID, e.g., CA_COUNTY_LOS_ANGELES)",
}
PARENT_TYPE_USAGE = "parentType must be 'state' or 'county'"


class HierarchyValidationError(ValueError):
    """Raised when request parameters fail validation."""

    def __init__(self, error: str, usage: str):
        self.error = error
        self.usage = usage
        super().__init__(error)


@dataclass
class HierarchyRequest:
    level: HierarchyLevel
    raw_level: str
    parent_id: Optional[str]
    parent_type: Optional[JurisdictionTier]


@dataclass
class HierarchyOutcome:
    status_code: int
    body: dict[str, Any]


def validate(level: Optional[str], parent_id: Optional[str], parent_type: Optional[str]) -> HierarchyRequest:
    if not level:
        raise HierarchyValidationError("Missing required parameter: level", LEVEL_USAGE)

    try:
        parsed_level = HierarchyLevel(level.strip().lower())
    except ValueError:
        raise HierarchyValidationError(f"Invalid level: {level}", LEVEL_USAGE)

    parent_id = (parent_id or "").strip() or None
    if parsed_level in PARENT_USAGE and not parent_id:
        raise HierarchyValidationError("Missing required parameter: parentId", PARENT_USAGE[parsed_level])

    parsed_parent_type = None
    if parent_type:
        try:
            parsed_parent_type = JurisdictionTier(parent_type.strip().lower())
        except ValueError:
            raise HierarchyValidationError(f"Invalid parentType: {parent_type}", PARENT_TYPE_USAGE)
        if parsed_parent_type == JurisdictionTier.city:
            raise HierarchyValidationError(f"Invalid parentType: {parent_type}", PARENT_TYPE_USAGE)

    return HierarchyRequest(
        level=parsed_level,
        raw_level=level,
        parent_id=parent_id,
        parent_type=parsed_parent_type,
    )


class HierarchyRequestHandler:
    def __init__(self, aggregator: ComplianceAggregator, *, include_details: bool = False):
        self.aggregator = aggregator
        self.include_details = include_details

    def resolve(self, request: HierarchyRequest) -> Optional[JurisdictionScope]:
        if request.level == HierarchyLevel.states:
            return None
        parent_type = request.parent_type.value if request.parent_type else None
        return decode(request.parent_id, parent_type)

    async def aggregate(self, request: HierarchyRequest, scope: Optional[JurisdictionScope]) -> list:
        if request.level == HierarchyLevel.states:
            return await self.aggregator.list_states()
        if request.level == HierarchyLevel.counties:
            return await self.aggregator.list_counties(scope.state_code)
        if request.level == HierarchyLevel.cities:
            return await self.aggregator.list_cities(scope.state_code, scope.county_name)
        raise AssertionError(f"Unhandled hierarchy level: {request.level}")

    def _server_error(self, exc: Exception) -> HierarchyOutcome:
        cause = exc.cause if isinstance(exc, AggregationFailure) else exc
        body = HierarchyErrorResponse(
            error="Internal server error",
            message=str(cause),
            details="".join(traceback.format_exception(exc)) if self.include_details else None,
        )
        return HierarchyOutcome(500, body.model_dump(exclude_none=True))

    async def handle(
        self,
        level: Optional[str],
        parent_id: Optional[str] = None,
        parent_type: Optional[str] = None,
    ) -> HierarchyOutcome:
        try:
            request = validate(level, parent_id, parent_type)
        except HierarchyValidationError as exc:
            body = HierarchyErrorResponse(error=exc.error, usage=exc.usage)
            return HierarchyOutcome(400, body.model_dump(exclude_none=True))

        try:
            scope = self.resolve(request)
        except InvalidJurisdictionId as exc:
            body = HierarchyErrorResponse(error="Invalid parentId", message=str(exc))
            return HierarchyOutcome(400, body.model_dump(exclude_none=True))

        try:
            rows = await self.aggregate(request, scope)
        except AggregationFailure as exc:
            logger.error("Hierarchy %s request failed: %s", request.level.value, exc.cause)
            return self._server_error(exc)
        except Exception as exc:
            logger.exception("Hierarchy %s request failed", request.level.value)
            return self._server_error(exc)

        response = HierarchyResponse(
            level=request.raw_level,
            parentId=request.parent_id,
            count=len(rows),
            data=[row.model_dump() for row in rows],
        )
        return HierarchyOutcome(200, response.model_dump())
