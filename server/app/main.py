import locale
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import load_settings
from .core.routes import directory_router, hierarchy_router
from .core.services.directory_transformer import configure_collation
from .warehouse import BigQueryWarehouse


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = load_settings()
    print(f"[Greywater] Starting server on port {settings.port} ({settings.environment})")

    if configure_collation(settings.collation_locale):
        print(f"[Greywater] State names sorted with collation {locale.setlocale(locale.LC_COLLATE)}")

    # One warehouse per process; the BigQuery client inside is created on first query
    app.state.warehouse = BigQueryWarehouse.from_settings(settings)
    if settings.bigquery_project_id:
        print(
            f"[Greywater] Warehouse: {settings.bigquery_project_id}.{settings.bigquery_dataset_id}"
        )
    else:
        print("[Greywater] BIGQUERY_PROJECT_ID not set; hierarchy endpoint will return errors")

    yield

    app.state.warehouse.close()
    print("[Greywater] Server shutdown complete")


app = FastAPI(
    title="Greywater Directory API",
    description="Greywater compliance directory and jurisdiction hierarchy",
    version="0.1.0",
    lifespan=lifespan,
)

# The hierarchy endpoint is public and read-only
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


app.include_router(hierarchy_router, prefix="/api/greywater-directory/hierarchy", tags=["hierarchy"])
# Shopify App Proxy path, plus a direct path for local testing
app.include_router(directory_router, prefix="/apps/greywater-directory", tags=["directory"])
app.include_router(directory_router, prefix="/greywater-directory", tags=["directory"])


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "greywater-directory",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
