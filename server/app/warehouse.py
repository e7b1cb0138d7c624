"""BigQuery access for the greywater compliance warehouse.

One ``BigQueryWarehouse`` is built at startup and handed to the services that
need it. The underlying ``bigquery.Client`` is created on first use and then
reused for the life of the process.
"""

import asyncio
import logging
import threading
from typing import Any, Mapping, Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import bigquery
from google.oauth2 import service_account

from .config import Settings

logger = logging.getLogger(__name__)


class WarehouseQueryError(Exception):
    """Raised when a warehouse query cannot be executed."""


def _parameter_type(value: Any) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "BOOL"
    if isinstance(value, int):
        return "INT64"
    if isinstance(value, float):
        return "FLOAT64"
    return "STRING"


def build_query_parameters(params: Optional[Mapping[str, Any]]) -> list:
    """Convert a name -> value mapping into BigQuery scalar parameters."""
    if not params:
        return []
    return [
        bigquery.ScalarQueryParameter(name, _parameter_type(value), value)
        for name, value in params.items()
    ]


class BigQueryWarehouse:
    def __init__(
        self,
        project_id: Optional[str],
        dataset_id: str,
        *,
        key_file: Optional[str] = None,
        credentials_info: Optional[dict] = None,
        location: Optional[str] = None,
        client: Optional[bigquery.Client] = None,
    ):
        self.project_id = project_id
        self.dataset_id = dataset_id
        self._key_file = key_file
        self._credentials_info = credentials_info
        self._location = location
        self._client = client
        self._client_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "BigQueryWarehouse":
        return cls(
            settings.bigquery_project_id,
            settings.bigquery_dataset_id,
            key_file=settings.bigquery_key_file,
            credentials_info=settings.bigquery_credentials,
            location=settings.bigquery_location,
        )

    def table(self, name: str) -> str:
        """Fully qualified, backtick-quoted table reference."""
        return f"`{self.project_id}.{self.dataset_id}.{name}`"

    def _build_credentials(self):
        if self._credentials_info:
            return service_account.Credentials.from_service_account_info(self._credentials_info)
        if self._key_file:
            return service_account.Credentials.from_service_account_file(self._key_file)
        # Application default credentials
        return None

    def _get_client(self) -> bigquery.Client:
        if self._client is None and not self.project_id:
            raise WarehouseQueryError("BIGQUERY_PROJECT_ID environment variable is required")
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    logger.info("Creating BigQuery client for project %s", self.project_id)
                    self._client = bigquery.Client(
                        project=self.project_id,
                        credentials=self._build_credentials(),
                        location=self._location,
                    )
        return self._client

    def _run_query(self, sql: str, params: Optional[Mapping[str, Any]]) -> list[dict]:
        client = self._get_client()
        job_config = bigquery.QueryJobConfig(query_parameters=build_query_parameters(params))
        job = client.query(sql, job_config=job_config)
        return [dict(row.items()) for row in job.result()]

    async def query(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> list[dict]:
        """Run a parameterized query and return rows as plain dicts."""
        try:
            return await asyncio.to_thread(self._run_query, sql, params)
        except (GoogleAPIError, GoogleAuthError, OSError, ValueError) as exc:
            raise WarehouseQueryError(f"Warehouse query failed: {exc}") from exc

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
