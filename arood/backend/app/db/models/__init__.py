from app.db.models.user import User
from app.db.models.screen import ScreenLocation, ScreenPricingOption, LocationReview
from app.db.models.booking import ScreenBooking
from app.db.models.booking_log import BookingLog
from app.db.models.campaign_media import CampaignMedia
from app.db.models.invoice import Invoice
from app.db.models.subscription import SubscriptionPlan, MerchantSubscription
from app.db.models.notification import MerchantNotification
from app.db.models.offer import Offer

__all__ = [
    "User",
    "ScreenLocation",
    "ScreenPricingOption",
    "LocationReview",
    "ScreenBooking",
    "BookingLog",
    "CampaignMedia",
    "Invoice",
    "SubscriptionPlan",
    "MerchantSubscription",
    "MerchantNotification",
    "Offer",
]
