from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from cv_checker.api.routes.match import router as match_router
from cv_checker.api.routes.parse import router as parse_router
from cv_checker.api.routes.report import router as report_router
from cv_checker.api.routes.verify import router as verify_router
from cv_checker.logging_config import setup_logging
from cv_checker.settings import get_settings

setup_logging(get_settings().log_level)

app = FastAPI(
    title="CV Checker (Publication Verification Service)",
    description="Parses CV publication lists, matches them against Crossref and verifies claimed authorship and author order",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.include_router(parse_router)
app.include_router(match_router)
app.include_router(verify_router)
app.include_router(report_router)

@app.get("/", tags=["health"])
def root():
    return {"service": "cv-checker", "status": "running"}

@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}

def custom_openapi():
    """Generate OpenAPI schema with custom settings."""
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="CV Checker API",
        version="0.1.0",
        description="Publication parsing, candidate matching and authorship verification",
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi
