"""
InternHub - Main Application

FastAPI backend with:
- PostgreSQL for users, profiles, internships and applications
- MongoDB GridFS for resume files
- Apify listing ingestion
- JWT authentication

Run: uvicorn internhub.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from internhub.api import api_router
from internhub.core.config import get_settings
from internhub.core.errors import register_exception_handlers
from internhub.db.mongodb import init_resume_bucket, test_mongo_connection
from internhub.db.postgres import test_postgres_connection

settings = get_settings()
logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


configure_logging()

# Create FastAPI app
app = FastAPI(
    title="InternHub",
    description="""
    An internship marketplace for students and recruiters in India.

    ## Features
    - **Authentication**: JWT-based auth; the role comes from the profile a user owns
    - **Internships**: Browse and filter the catalog, see similar internships
    - **Applications**: Apply with an optional resume (PDF/DOC/DOCX)
    - **Recruiters**: Post internships, review applications, dashboard counts
    - **Ingestion**: Pull internship listings from LinkedIn via Apify
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize the resume bucket indexes on startup."""
    try:
        init_resume_bucket()
        logger.info("Resume bucket '%s' initialized", settings.resume_bucket)
    except PyMongoError as e:
        logger.warning("Resume bucket initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "InternHub"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
