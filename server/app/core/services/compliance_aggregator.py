"""Three-tier rollups over the greywater compliance warehouse.

Each operation issues one fixed query shape (states, counties of a state,
cities of a state or county) and returns typed rows. Regulation text in the
county and city rollups is *local only*: it is filtered on the regulation
types that belong to that tier, so state-level or parent-county rules never
leak into a child's local fields.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Protocol

from ..models.hierarchy import CityRow, CountyRow, RegulationType, StateRow

logger = logging.getLogger(__name__)

COUNTY_LOCAL_TYPES: tuple[RegulationType, ...] = (
    RegulationType.county_ordinance,
    RegulationType.local_ordinance,
)
CITY_LOCAL_TYPES: tuple[RegulationType, ...] = (
    RegulationType.municipal_code,
    RegulationType.city_ordinance,
)
# Jurisdictions whose programs also credit the county they share a name with
COUNTY_PROGRAM_SOURCE_TYPES: tuple[str, ...] = ("water_district", "county")

ACTIVE_PROGRAM_STATUS = "active"


class Warehouse(Protocol):
    def table(self, name: str) -> str: ...

    async def query(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> list[dict]: ...


class AggregationFailure(Exception):
    """Raised when a warehouse query behind a rollup fails."""

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")


def _sql_in(values: Iterable) -> str:
    quoted = ", ".join(f"'{getattr(v, 'value', v)}'" for v in values)
    return f"({quoted})"


class ComplianceAggregator:
    def __init__(self, warehouse: Warehouse):
        self.warehouse = warehouse

    async def _run(self, operation: str, sql: str, params: Optional[dict] = None) -> list[dict]:
        try:
            rows = await self.warehouse.query(sql, params)
        except Exception as exc:
            logger.exception("Warehouse query for %s failed", operation)
            raise AggregationFailure(operation, exc) from exc
        logger.debug("%s returned %d rows", operation, len(rows))
        return rows

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def states_query(self) -> str:
        t = self.warehouse.table
        return f"""
            SELECT
              j.jurisdiction_id,
              j.state_code,
              j.state_name,
              j.population,
              j.website,
              j.contact_phone,
              j.contact_email,
              (SELECT COUNT(DISTINCT county_name)
               FROM {t('jurisdictions_master')}
               WHERE state_code = j.state_code AND jurisdiction_type = 'county') AS county_count,
              (SELECT COUNT(*)
               FROM {t('jurisdictions_master')}
               WHERE state_code = j.state_code AND jurisdiction_type = 'city') AS city_count,
              STRING_AGG(DISTINCT r.regulation_name, '; ') AS state_regulations,
              STRING_AGG(DISTINCT r.system_allowance, ', ') AS state_allowance,
              (SELECT COUNT(DISTINCT prog.program_id)
               FROM {t('program_jurisdiction_link')} pjl
               JOIN {t('incentive_programs')} prog
                 ON pjl.program_id = prog.program_id
               WHERE pjl.jurisdiction_id = j.jurisdiction_id
                 AND prog.program_status = '{ACTIVE_PROGRAM_STATUS}') AS active_program_count
            FROM {t('jurisdictions_master')} j
            LEFT JOIN {t('regulations_master')} r
              ON j.jurisdiction_id = r.jurisdiction_id
            WHERE j.jurisdiction_type = 'state'
            GROUP BY
              j.jurisdiction_id, j.state_code, j.state_name, j.population,
              j.website, j.contact_phone, j.contact_email
            ORDER BY j.state_name
        """

    async def list_states(self) -> list[StateRow]:
        rows = await self._run("list_states", self.states_query())
        return [StateRow(**row) for row in rows]

    # ------------------------------------------------------------------
    # Counties
    # ------------------------------------------------------------------

    def counties_query(self) -> str:
        t = self.warehouse.table
        local_types = _sql_in(COUNTY_LOCAL_TYPES)
        return f"""
            WITH county_cities AS (
              SELECT
                county_name,
                COUNT(DISTINCT city_name) AS city_count,
                SUM(population) AS total_population
              FROM {t('jurisdictions_master')}
              WHERE state_code = @stateCode
                AND jurisdiction_type = 'city'
                AND population > 0
              GROUP BY county_name
            )
            SELECT
              j.jurisdiction_id,
              j.jurisdiction_name,
              j.county_name,
              j.state_code,
              j.state_name,
              j.population,
              j.website,
              j.contact_phone,
              j.contact_email,
              COALESCE(cc.city_count, 0) AS city_count,
              COALESCE(cc.total_population, 0) AS total_city_population,
              STRING_AGG(DISTINCT
                CASE WHEN r.regulation_type IN {local_types}
                THEN r.regulation_name END, '; ') AS local_regulations,
              STRING_AGG(DISTINCT
                CASE WHEN r.regulation_type IN {local_types}
                THEN r.system_allowance END, ', ') AS county_allowance,
              MIN(p.base_fee) AS base_permit_fee,
              MIN(p.processing_time_days) AS processing_time_days,
              STRING_AGG(DISTINCT p.application_url, '; ') AS application_url,
              (SELECT COUNT(DISTINCT prog.program_id)
               FROM {t('program_jurisdiction_link')} pjl
               JOIN {t('jurisdictions_master')} j2
                 ON pjl.jurisdiction_id = j2.jurisdiction_id
               JOIN {t('incentive_programs')} prog
                 ON pjl.program_id = prog.program_id
               WHERE (pjl.jurisdiction_id = j.jurisdiction_id
                      OR (j2.county_name = j.county_name
                          AND j2.state_code = j.state_code
                          AND j2.jurisdiction_type IN {_sql_in(COUNTY_PROGRAM_SOURCE_TYPES)}))
                 AND prog.program_status = '{ACTIVE_PROGRAM_STATUS}') AS active_program_count
            FROM {t('jurisdictions_master')} j
            LEFT JOIN county_cities cc ON j.county_name = cc.county_name
            LEFT JOIN {t('regulations_master')} r
              ON j.jurisdiction_id = r.jurisdiction_id
            LEFT JOIN {t('permits_master')} p
              ON j.jurisdiction_id = p.jurisdiction_id
            WHERE j.state_code = @stateCode
              AND j.jurisdiction_type = 'county'
            GROUP BY
              j.jurisdiction_id, j.jurisdiction_name, j.county_name,
              j.state_code, j.state_name, j.population, j.website,
              j.contact_phone, j.contact_email, cc.city_count, cc.total_population
            ORDER BY j.county_name
        """

    async def list_counties(self, state_code: str) -> list[CountyRow]:
        rows = await self._run(
            "list_counties",
            self.counties_query(),
            {"stateCode": state_code},
        )
        return [CountyRow(**row) for row in rows]

    # ------------------------------------------------------------------
    # Cities
    # ------------------------------------------------------------------

    def cities_query(self, by_county: bool) -> str:
        t = self.warehouse.table
        local_types = _sql_in(CITY_LOCAL_TYPES)
        where_clause = "j.state_code = @stateCode AND j.jurisdiction_type = 'city'"
        if by_county:
            # Ids carry upper-cased county names
            where_clause += " AND UPPER(j.county_name) = UPPER(@countyName)"
        return f"""
            SELECT
              j.jurisdiction_id,
              j.city_name,
              j.county_name,
              j.state_code,
              j.state_name,
              j.population,
              j.website,
              j.contact_phone,
              j.contact_email,
              STRING_AGG(DISTINCT
                CASE WHEN r.regulation_type IN {local_types}
                THEN r.regulation_name END, '; ') AS local_city_regulations,
              STRING_AGG(DISTINCT
                CASE WHEN r.regulation_type IN {local_types}
                THEN r.system_allowance END, ', ') AS city_allowance,
              STRING_AGG(DISTINCT
                CASE WHEN r.regulation_type IN {local_types}
                THEN r.use_restrictions END, '; ') AS city_use_restrictions,
              MIN(p.base_fee) AS city_permit_fee,
              MIN(p.processing_time_days) AS processing_days,
              MAX(r.professional_installation_required) AS pro_required,
              (SELECT STRING_AGG(DISTINCT prog.program_name, '; ')
               FROM {t('program_jurisdiction_link')} pjl
               JOIN {t('incentive_programs')} prog
                 ON pjl.program_id = prog.program_id
               WHERE pjl.jurisdiction_id = j.jurisdiction_id
                 AND prog.program_status = '{ACTIVE_PROGRAM_STATUS}') AS incentives,
              (SELECT COUNT(DISTINCT prog.program_id)
               FROM {t('program_jurisdiction_link')} pjl
               JOIN {t('incentive_programs')} prog
                 ON pjl.program_id = prog.program_id
               WHERE pjl.jurisdiction_id = j.jurisdiction_id
                 AND prog.program_status = '{ACTIVE_PROGRAM_STATUS}') AS active_program_count,
              MAX(CASE WHEN r.regulation_type IN {local_types} THEN 1 ELSE 0 END) AS has_local_rules
            FROM {t('jurisdictions_master')} j
            LEFT JOIN {t('regulations_master')} r
              ON j.jurisdiction_id = r.jurisdiction_id
            LEFT JOIN {t('permits_master')} p
              ON j.jurisdiction_id = p.jurisdiction_id
            WHERE {where_clause}
            GROUP BY
              j.jurisdiction_id, j.city_name, j.county_name,
              j.state_code, j.state_name, j.population, j.website,
              j.contact_phone, j.contact_email
            ORDER BY j.population DESC, j.city_name
        """

    async def list_cities(self, state_code: str, county_name: Optional[str] = None) -> list[CityRow]:
        params: dict[str, Any] = {"stateCode": state_code}
        if county_name:
            params["countyName"] = county_name

        rows = await self._run(
            "list_cities",
            self.cities_query(by_county=bool(county_name)),
            params,
        )
        cities = [CityRow(**row) for row in rows]
        # Population descending, then name
        cities.sort(key=lambda c: (-(c.population or 0), c.city_name or ""))
        return cities
