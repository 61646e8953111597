from fastapi import APIRouter

from vendor_market.api.v1 import admin, applications, attachments, auth, events, health, team, vendor

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(applications.router, prefix="/applications", tags=["applications"])
api_router.include_router(attachments.router, prefix="/attachments", tags=["attachments"])
api_router.include_router(vendor.router, prefix="/vendor", tags=["vendor"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(team.router, prefix="/team", tags=["team"])
