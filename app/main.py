import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import health
from app.api.v1 import contact
from app.core.config import ContactConfig, settings
from app.core.email import SmtpTransport
from app.core.errors import register_exception_handlers
from app.core.honeypot import Honeypot
from app.core.logging import setup_logging
from app.core.middleware import RequestIdMiddleware
from app.services.contact_service import ContactService

# Setup logging
logger = setup_logging()


tags_metadata = [
    {
        "name": "contact",
        "description": "**Contact** - Public contact form. Messages are spam-checked and forwarded to the site owner.",
    },
    {
        "name": "health",
        "description": "**Health** - Liveness, readiness and configuration status.",
    },
]


def build_contact_service(config: ContactConfig) -> ContactService:
    return ContactService(
        config=config,
        honeypot=Honeypot(config),
        transport=SmtpTransport(config),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    config = ContactConfig.from_settings(settings)
    if not config.honeypot_seed:
        logger.warning("HONEYPOT_ENCRYPTION_SEED is not set; proof tokens are unkeyed")
    if not config.transport_host:
        logger.warning("TRANSPORT_HOST is not set; contact messages cannot be delivered")

    service = build_contact_service(config)
    app.state.contact_config = config
    app.state.honeypot = service.honeypot
    app.state.contact_service = service

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Contact form backend for a personal portfolio site.",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Request ID Tracing
app.add_middleware(RequestIdMiddleware)

# Register global exception handlers
register_exception_handlers(app)

app.include_router(contact.router, prefix=f"{settings.API_V1_PREFIX}", tags=["contact"])

app.include_router(
    health.router, prefix=f"{settings.API_V1_PREFIX}/health", tags=["health"]
)


@app.get("/health", summary="Health check")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/", summary="API root")
async def root():
    """Root endpoint with API info"""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health",
    }
