from .application import (
    ApplicationDetail,
    ApplicationDetails,
    ApplicationListItem,
    ApplicationNotesUpdate,
    ApplicationRead,
    ApplicationStatusUpdate,
    ApplicationSubmit,
    ApplicationSubmitted,
    StatusCounts,
)
from .attachment import AttachmentRead
from .auth import LoginRequest, SignupRequest, TokenResponse
from .event import (
    EventCreate,
    EventRead,
    EventStatusUpdate,
    EventSummary,
    EventUpdate,
    EventWithCounts,
)
from .pagination import PaginatedResponse, PaginationParams
from .user import CurrentUserRead, RoleUpdate, TeamInviteRequest, UserRead, UserWithRole
from .vendor import VendorInfo, VendorProfileUpdate, VendorRead
from .vendor_portal import VendorDashboard

__all__ = [
    "ApplicationDetail",
    "ApplicationDetails",
    "ApplicationListItem",
    "ApplicationNotesUpdate",
    "ApplicationRead",
    "ApplicationStatusUpdate",
    "ApplicationSubmit",
    "ApplicationSubmitted",
    "AttachmentRead",
    "CurrentUserRead",
    "EventCreate",
    "EventRead",
    "EventStatusUpdate",
    "EventSummary",
    "EventUpdate",
    "EventWithCounts",
    "LoginRequest",
    "PaginatedResponse",
    "PaginationParams",
    "RoleUpdate",
    "SignupRequest",
    "StatusCounts",
    "TeamInviteRequest",
    "TokenResponse",
    "UserRead",
    "UserWithRole",
    "VendorDashboard",
    "VendorInfo",
    "VendorProfileUpdate",
    "VendorRead",
]
