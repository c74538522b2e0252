from fastapi import APIRouter

from app.api.v1.endpoints import admin, auth, business, customer, health

api_router = APIRouter()

# Health and token verification
api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, tags=["authentication"])

# Public booking endpoints (customer-facing)
api_router.include_router(customer.router, prefix="/customer", tags=["customer"])

# Business owner endpoints
api_router.include_router(business.router, prefix="/business", tags=["business"])

# Platform admin endpoints
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
