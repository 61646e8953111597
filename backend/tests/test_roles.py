from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from tests.utils import create_user
from vendor_market.core.roles import Role, has_minimum_role, home_path_for
from vendor_market.models import User, UserProfile
from vendor_market.services.permissions import RequestContext, require_role, resolve_role
from vendor_market.web.guards import required_role_for


class TestRoleHierarchy:
    @pytest.mark.parametrize(
        "user_role,required,expected",
        [
            ("admin", "organizer", True),
            ("vendor", "organizer", False),
            ("organizer", "organizer", True),
            ("admin", "vendor", True),
            ("organizer", "admin", False),
        ],
    )
    def test_has_minimum_role(self, user_role, required, expected):
        assert has_minimum_role(user_role, required) is expected

    def test_home_path_for_role(self):
        assert home_path_for(Role.ADMIN) == "/dashboard"
        assert home_path_for(Role.ORGANIZER) == "/dashboard"
        assert home_path_for(Role.VENDOR) == "/vendor"

    def test_request_context_without_user_has_no_role(self):
        context = RequestContext()
        assert not context.is_authenticated
        assert not context.has_role(Role.VENDOR)


class TestRequireRole:
    def test_new_user_gets_vendor_profile(self, session):
        user = create_user(session, "fresh@example.com")
        profile = session.get(UserProfile, user.id)
        assert profile is not None
        assert profile.role == "vendor"

    def test_missing_user_is_not_authenticated(self, session):
        result = require_role(session, None, Role.VENDOR)
        assert result.authorized is False
        assert result.reason == "Not authenticated"

    def test_insufficient_role(self, session):
        user = create_user(session, "v@example.com", Role.VENDOR)
        result = require_role(session, user, Role.ORGANIZER)
        assert result.authorized is False
        assert result.role == Role.VENDOR
        assert result.reason == "Unauthorized: insufficient role"

    def test_sufficient_role(self, session):
        user = create_user(session, "a@example.com", Role.ADMIN)
        result = require_role(session, user, Role.ORGANIZER)
        assert result.authorized is True
        assert result.role == Role.ADMIN

    def test_missing_profile_falls_back_to_vendor(self, session):
        user = create_user(session, "nop@example.com")
        session.delete(session.get(UserProfile, user.id))
        session.commit()
        assert resolve_role(session, user) == Role.VENDOR

    def test_lookup_failure_fails_closed(self):
        session = MagicMock()
        session.get.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        user = User(email="x@example.com", hashed_password="x")

        result = require_role(session, user, Role.VENDOR)

        assert result.authorized is False
        assert result.reason == "Unable to verify permissions"


class TestPageRouteTable:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/dashboard/admin", Role.ADMIN),
            ("/dashboard/team", Role.ADMIN),
            ("/dashboard", Role.ORGANIZER),
            ("/dashboard/events", Role.ORGANIZER),
            ("/vendor", Role.VENDOR),
            ("/login", None),
            ("/", None),
            ("/vendors-list", None),
        ],
    )
    def test_required_role_for(self, path, expected):
        assert required_role_for(path) == expected
