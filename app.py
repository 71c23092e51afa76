"""
FastAPI application initialization for Zythorix360.
This file configures all application components: routes, middleware, logging, etc.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from zythorix.core.config import settings
from zythorix.core.logging import setup_logging, get_logger
from zythorix.api import api_router, healthcheck_router
from zythorix.models.base import create_tables
from zythorix.db.session import engine
from zythorix.utils.error_handling import INTERNAL_ERROR

# Setup logging system
setup_logging()
logger = get_logger(__name__)

# Create and configure FastAPI application
app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Study materials, Razorpay payments and the influencer referral program",
    version=settings.VERSION,
    docs_url="/api/docs" if not settings.PRODUCTION else None,
    redoc_url="/api/redoc" if not settings.PRODUCTION else None
)


# Every error is rendered as {"error": ...}; structured details pass through unchanged
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": details}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": INTERNAL_ERROR}
    )


# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(api_router, prefix="/api")
app.include_router(healthcheck_router, tags=["Health"])


@app.on_event("startup")
async def startup_event():
    """Create missing tables and log the running configuration"""
    logger.info(f"🚀 Starting {settings.APP_NAME} v{settings.VERSION}")
    create_tables(engine)
    logger.info(f"Admin allow-list: {len(settings.admin_emails)} address(es)")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"{settings.APP_NAME} shutting down")
