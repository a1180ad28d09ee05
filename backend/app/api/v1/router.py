from fastapi import APIRouter
from app.api.v1.endpoints import auth, users, problems, public, leads, analytics, health

api_router = APIRouter()

api_router.include_router(health.router)


@api_router.get("", tags=["Root"])
async def api_info():
    """API version info"""
    return {
        "success": True,
        "message": "TRIZEN CMS API v1",
        "version": "1.0.0",
        "endpoints": {
            "auth": "/api/v1/auth",
            "users": "/api/v1/users",
            "problems": "/api/v1/problems",
            "analytics": "/api/v1/analytics",
            "leads": "/api/v1/leads",
            "public": "/api/v1/public",
        },
    }


api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(problems.router)
api_router.include_router(public.router)
api_router.include_router(leads.router)
api_router.include_router(analytics.router)
