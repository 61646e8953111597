from datetime import datetime, timedelta

from sqlmodel import Session

from vendor_market.core.roles import Role
from vendor_market.core.security import create_access_token, get_password_hash
from vendor_market.models import Application, Event, EventStatus, User, UserProfile, Vendor

TEST_PASSWORD = "secret123"


def create_user(session: Session, email: str, role: Role = Role.VENDOR, password: str = TEST_PASSWORD) -> User:
    user = User(email=email, hashed_password=get_password_hash(password))
    session.add(user)
    session.flush()
    profile = session.get(UserProfile, user.id)
    profile.role = role.value
    session.add(profile)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def make_event(session: Session, **overrides) -> Event:
    now = datetime.utcnow()
    values = {
        "name": "Winter Holiday Market",
        "event_date": now + timedelta(days=30),
        "location": "Town Square",
        "application_deadline": now + timedelta(days=10),
        "status": EventStatus.ACTIVE.value,
    }
    values.update(overrides)
    event = Event(**values)
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


def make_vendor(session: Session, **overrides) -> Vendor:
    values = {
        "business_name": "Handcrafted Jewelry Co.",
        "contact_name": "Sarah Johnson",
        "email": "sarah@example.com",
    }
    values.update(overrides)
    vendor = Vendor(**values)
    session.add(vendor)
    session.commit()
    session.refresh(vendor)
    return vendor


def make_application(session: Session, event: Event, vendor: Vendor, **overrides) -> Application:
    values = {
        "event_id": event.id,
        "vendor_id": vendor.id,
        "product_categories": ["jewelry"],
    }
    values.update(overrides)
    application = Application(**values)
    session.add(application)
    session.commit()
    session.refresh(application)
    return application
