# main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging

from .config.database import get_database_manager, lifespan
from .config.settings import get_settings
from .routers import all_routers
from .schemas.common import HealthCheckResponse, RootResponse, ValidationErrorDetail, ValidationErrorResponse
from .utils.dates import utc_now

settings = get_settings()

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan
)

for router in all_routers:
    app.include_router(router, prefix=settings.api_prefix)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        ValidationErrorDetail(
            field=".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            message=error.get("msg", "Invalid value"),
            input_value=error.get("input"),
        )
        for error in exc.errors()
    ]
    body = ValidationErrorResponse(
        error="validation_error",
        message="Request validation failed",
        details=details,
    )
    return JSONResponse(status_code=422, content=body.model_dump(mode="json"))


@app.get("/", response_model=RootResponse, tags=["Root"])
async def root():
    """Root endpoint - Always accessible"""
    return RootResponse(
        message=f"Welcome to {settings.app_name}",
        version=settings.app_version,
        docs="/docs",
        health="/health",
        status="running",
        timestamp=utc_now().isoformat(),
    )


@app.get("/health", response_model=HealthCheckResponse, tags=["Health"])
async def health_check():
    """Health check endpoint - Always accessible"""
    db_manager = get_database_manager()
    try:
        if db_manager.is_connected():
            await db_manager.get_database().command('ping')
            db_status = "connected"
        else:
            db_status = "disconnected"
    except Exception as e:
        db_status = f"error: {str(e)}"

    return HealthCheckResponse(
        status="healthy",
        database=db_status,
        timestamp=utc_now().isoformat(),
        version=settings.app_version,
    )
