import asyncio

from app.core.services.compliance_aggregator import ComplianceAggregator
from app.core.services.hierarchy_handler import (
    LEVEL_USAGE,
    PARENT_TYPE_USAGE,
    PARENT_USAGE,
    HierarchyRequestHandler,
)
from app.core.models.hierarchy import HierarchyLevel


class _FakeWarehouse:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.calls = []

    def table(self, name):
        return f"`test-project.greywater_compliance.{name}`"

    async def query(self, sql, params=None):
        self.calls.append((sql, params))
        if self.error is not None:
            raise self.error
        return list(self.rows)


def _handler(warehouse, include_details=False):
    return HierarchyRequestHandler(ComplianceAggregator(warehouse), include_details=include_details)


def test_missing_level_is_rejected_before_querying():
    warehouse = _FakeWarehouse()
    outcome = asyncio.run(_handler(warehouse).handle(None))

    assert outcome.status_code == 400
    assert outcome.body == {
        "success": False,
        "error": "Missing required parameter: level",
        "usage": LEVEL_USAGE,
    }
    assert warehouse.calls == []


def test_invalid_level_is_rejected():
    warehouse = _FakeWarehouse()
    outcome = asyncio.run(_handler(warehouse).handle("regions"))

    assert outcome.status_code == 400
    assert outcome.body["error"] == "Invalid level: regions"
    assert outcome.body["usage"] == LEVEL_USAGE
    assert warehouse.calls == []


def test_counties_and_cities_require_parent_id():
    for level in ("counties", "cities"):
        warehouse = _FakeWarehouse()
        outcome = asyncio.run(_handler(warehouse).handle(level, "  "))

        assert outcome.status_code == 400
        assert outcome.body["error"] == "Missing required parameter: parentId"
        assert outcome.body["usage"] == PARENT_USAGE[HierarchyLevel(level)]
        assert warehouse.calls == []


def test_parent_type_must_be_state_or_county():
    warehouse = _FakeWarehouse()
    outcome = asyncio.run(_handler(warehouse).handle("cities", "CA_STATE", "city"))

    assert outcome.status_code == 400
    assert outcome.body["usage"] == PARENT_TYPE_USAGE
    assert warehouse.calls == []


def test_unresolvable_parent_id_is_a_client_error():
    warehouse = _FakeWarehouse()
    outcome = asyncio.run(_handler(warehouse).handle("counties", "1_STATE"))

    assert outcome.status_code == 400
    assert outcome.body["success"] is False
    assert outcome.body["error"] == "Invalid parentId"
    assert warehouse.calls == []


def test_states_ignore_parent_id():
    warehouse = _FakeWarehouse(rows=[{"jurisdiction_id": "CA_STATE", "state_code": "CA"}])
    outcome = asyncio.run(_handler(warehouse).handle("states", "junk"))

    assert outcome.status_code == 200
    assert outcome.body["success"] is True
    assert outcome.body["level"] == "states"
    assert outcome.body["count"] == 1
    assert outcome.body["data"][0]["jurisdiction_id"] == "CA_STATE"


def test_counties_of_state_id():
    warehouse = _FakeWarehouse(
        rows=[
            {"jurisdiction_id": "CA_COUNTY_ALAMEDA", "state_code": "CA", "county_name": "Alameda"},
            {"jurisdiction_id": "CA_COUNTY_LOS_ANGELES", "state_code": "CA", "county_name": "Los Angeles"},
        ]
    )
    outcome = asyncio.run(_handler(warehouse).handle("counties", "CA_STATE"))

    assert outcome.status_code == 200
    assert outcome.body["parentId"] == "CA_STATE"
    assert outcome.body["count"] == 2
    assert len(outcome.body["data"]) == outcome.body["count"]
    assert warehouse.calls[0][1] == {"stateCode": "CA"}


def test_level_is_case_insensitive_and_echoed_as_given():
    warehouse = _FakeWarehouse()
    outcome = asyncio.run(_handler(warehouse).handle("Counties", "CA"))

    assert outcome.status_code == 200
    assert outcome.body["level"] == "Counties"
    assert warehouse.calls[0][1] == {"stateCode": "CA"}


def test_cities_of_county_id():
    warehouse = _FakeWarehouse()
    outcome = asyncio.run(_handler(warehouse).handle("cities", "CA_COUNTY_LOS_ANGELES"))

    assert outcome.status_code == 200
    assert outcome.body["count"] == 0
    assert outcome.body["data"] == []
    assert warehouse.calls[0][1] == {"stateCode": "CA", "countyName": "LOS ANGELES"}


def test_cities_with_parent_type_state_use_whole_state():
    warehouse = _FakeWarehouse()
    asyncio.run(_handler(warehouse).handle("cities", "CA_COUNTY_LOS_ANGELES", "state"))

    assert warehouse.calls[0][1] == {"stateCode": "CA"}


def test_warehouse_failure_returns_server_error_without_details():
    warehouse = _FakeWarehouse(error=RuntimeError("Access Denied"))
    outcome = asyncio.run(_handler(warehouse).handle("counties", "CA_STATE"))

    assert outcome.status_code == 500
    assert outcome.body == {
        "success": False,
        "error": "Internal server error",
        "message": "Access Denied",
    }


def test_warehouse_failure_includes_details_outside_production():
    warehouse = _FakeWarehouse(error=RuntimeError("Access Denied"))
    outcome = asyncio.run(_handler(warehouse, include_details=True).handle("states"))

    assert outcome.status_code == 500
    assert "RuntimeError" in outcome.body["details"]
    assert "data" not in outcome.body
