from fastapi import FastAPI

from . import assessments, certifications, enrollments, health, notifications, recommendations


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(assessments.router)
    app.include_router(recommendations.router)
    app.include_router(certifications.router)
    app.include_router(notifications.router)
    app.include_router(enrollments.router)
