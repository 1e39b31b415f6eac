from fastapi import APIRouter
from app.api.v1 import auth, screens, bookings, invoices, subscriptions, payments, notifications, offers, admin

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(screens.router, tags=["screens"])
api_router.include_router(bookings.router, tags=["bookings"])
api_router.include_router(invoices.router, tags=["invoices"])
api_router.include_router(subscriptions.router, tags=["subscriptions"])
api_router.include_router(payments.router, tags=["payments"])
api_router.include_router(notifications.router, tags=["notifications"])
api_router.include_router(offers.router, tags=["offers"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
