import json
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv


@dataclass
class Settings:
    # Warehouse
    bigquery_project_id: Optional[str]
    bigquery_dataset_id: str
    bigquery_key_file: Optional[str]
    bigquery_credentials: Optional[dict]
    bigquery_location: Optional[str]

    # Shopify App Proxy
    shopify_proxy_secret: Optional[str]

    # Directory data
    state_directory_path: str
    pages_dir: str
    collation_locale: str

    # Server
    environment: str
    port: int

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# Global settings instance
_settings: Optional[Settings] = None

_SERVER_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _parse_credentials(raw: Optional[str]) -> Optional[dict]:
    if not raw:
        return None
    try:
        credentials = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("BIGQUERY_CREDENTIALS must be a service account JSON document") from exc
    if not isinstance(credentials, dict):
        raise ValueError("BIGQUERY_CREDENTIALS must be a service account JSON document")
    return credentials


def load_settings() -> Settings:
    global _settings
    load_dotenv()

    # Checked when the warehouse is first queried; the directory never needs it
    project_id = os.getenv("BIGQUERY_PROJECT_ID", "").strip() or None

    _settings = Settings(
        bigquery_project_id=project_id,
        bigquery_dataset_id=os.getenv("BIGQUERY_DATASET_ID", "greywater_compliance").strip(),
        bigquery_key_file=os.getenv("BIGQUERY_KEY_FILE") or None,
        bigquery_credentials=_parse_credentials(os.getenv("BIGQUERY_CREDENTIALS")),
        bigquery_location=os.getenv("BIGQUERY_LOCATION") or None,
        shopify_proxy_secret=os.getenv("SHOPIFY_PROXY_SECRET") or None,
        state_directory_path=os.getenv(
            "STATE_DIRECTORY_PATH",
            os.path.join(_SERVER_ROOT, "greywater-state-directory.json"),
        ),
        pages_dir=os.getenv("PAGES_DIR", os.path.join(_SERVER_ROOT, "pages")),
        collation_locale=os.getenv("COLLATION_LOCALE", ""),
        environment=os.getenv("APP_ENV", "production").strip().lower(),
        port=int(os.getenv("PORT", "8000")),
    )
    return _settings


def get_settings() -> Settings:
    """Get the loaded settings. Must call load_settings() first."""
    global _settings
    if _settings is None:
        raise RuntimeError("Settings not initialized. Call load_settings() first.")
    return _settings
