"""API routes."""

from fastapi import APIRouter

from grinfood.api.routes import auth, menu, orders, payments, promotions, reviews, stats, users, verify

api_router = APIRouter()

# Account routes are mounted at the API root (/signup, /get-role, ...)
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(users.router, tags=["users"])
api_router.include_router(payments.router, tags=["payments"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(promotions.router, prefix="/promotions", tags=["promotions"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
api_router.include_router(menu.router, prefix="/menu", tags=["menu"])
api_router.include_router(verify.router, prefix="/verify", tags=["verify"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
