"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from internhub.api.routes.auth_routes import router as auth_router
from internhub.api.routes.internship_routes import router as internship_router
from internhub.api.routes.student_routes import router as student_router
from internhub.api.routes.recruiter_routes import router as recruiter_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(internship_router)
api_router.include_router(student_router)
api_router.include_router(recruiter_router)
