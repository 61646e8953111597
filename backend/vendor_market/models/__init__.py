from .application import Application, ApplicationStatus, BoothPreference, ProductCategory
from .attachment import Attachment
from .event import EVENT_STATUS_TRANSITIONS, Event, EventStatus
from .user import User
from .user_profile import UserProfile
from .vendor import Vendor

__all__ = [
    "Application",
    "ApplicationStatus",
    "Attachment",
    "BoothPreference",
    "EVENT_STATUS_TRANSITIONS",
    "Event",
    "EventStatus",
    "ProductCategory",
    "User",
    "UserProfile",
    "Vendor",
]
