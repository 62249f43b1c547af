"""
API v1 router
"""
from fastapi import APIRouter

from awareness_api.api.v1.endpoints import (
    auth,
    invitations,
    events,
    reports,
    gdpr,
)

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router)
api_router.include_router(invitations.router, prefix="/invitations", tags=["Invitations"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(gdpr.router, prefix="/gdpr", tags=["GDPR"])


@api_router.get("/")
async def api_root():
    """API v1 root endpoint"""
    return {
        "message": "Awareness Reporting API v1",
        "status": "active",
        "version": "1.0.0",
        "endpoints": {
            "auth": "/auth",
            "invitations": "/invitations",
            "events": "/events",
            "reports": "/reports",
            "gdpr": "/gdpr/settings",
        }
    }
