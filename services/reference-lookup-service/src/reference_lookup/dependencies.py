"""Dependency injection for FastAPI endpoints."""

from fastapi import HTTPException, Request

from reference_lookup.orchestrator import LookupOrchestrator


def get_orchestrator(request: Request) -> LookupOrchestrator:
    """Return the orchestrator built during application startup.

    Raises:
        HTTPException: 503 if the application has not finished starting.
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Lookup service not ready")
    return orchestrator
