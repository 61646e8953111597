from datetime import datetime, timedelta
from uuid import UUID

from sqlmodel import select

from tests.utils import auth_headers, create_user, make_application, make_event, make_vendor
from vendor_market.models import Application, Attachment, UserProfile, Vendor

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"0" * 64


def _form(event_id, **overrides):
    data = {
        "business_name": "Handcrafted Jewelry Co.",
        "contact_name": "Sarah Johnson",
        "email": "sarah@example.com",
        "phone": "(555) 123-4567",
        "website": "https://jewelry.example.com",
        "description": "Sterling silver jewelry",
        "event_id": str(event_id),
        "booth_preference": "indoor",
        "product_categories": ["jewelry", "art"],
        "special_requirements": "Needs a power outlet",
    }
    data.update(overrides)
    return data


class TestSubmitApplication:
    def test_submit_creates_pending_application_and_sends_one_email(
        self, client, session, active_event, sent_emails
    ):
        response = client.post("/api/v1/applications/", data=_form(active_event.id))

        assert response.status_code == 201, response.text
        application = session.get(Application, UUID(response.json()["application_id"]))
        assert application.status == "pending"
        assert application.product_categories == ["jewelry", "art"]
        assert application.booth_preference == "indoor"

        assert len(sent_emails) == 1
        assert sent_emails[0]["to"] == "sarah@example.com"
        assert sent_emails[0]["subject"] == f"Application Received: {active_event.name}"

    def test_submit_with_files_stores_attachments(self, client, session, storage, active_event):
        response = client.post(
            "/api/v1/applications/",
            data=_form(active_event.id),
            files=[
                ("files", ("Booth Photo.PNG", PNG_BYTES, "image/png")),
                ("files", ("menu.pdf", b"%PDF-1.4 test", "application/pdf")),
            ],
        )

        assert response.status_code == 201, response.text
        attachments = session.exec(select(Attachment)).all()
        assert len(attachments) == 2
        for attachment in attachments:
            assert attachment.file_path.startswith(f"applications/{attachment.application_id}/")
            assert storage.exists(attachment.file_path)
        photo = next(a for a in attachments if a.file_name == "Booth Photo.PNG")
        assert photo.file_path.endswith("-booth-photo.png")
        assert photo.file_size == len(PNG_BYTES)

    def test_submit_reuses_vendor_by_email_and_updates_contact(self, client, session, active_event):
        existing = make_vendor(session, email="sarah@example.com", contact_name="Old Name")

        response = client.post(
            "/api/v1/applications/", data=_form(active_event.id, email="Sarah@Example.com")
        )

        assert response.status_code == 201
        assert response.json()["vendor_id"] == str(existing.id)
        session.expire_all()
        assert session.get(Vendor, existing.id).contact_name == "Sarah Johnson"

    def test_duplicate_application_is_rejected(self, client, session, active_event, sent_emails):
        assert client.post("/api/v1/applications/", data=_form(active_event.id)).status_code == 201

        response = client.post("/api/v1/applications/", data=_form(active_event.id))

        assert response.status_code == 409
        assert response.json()["detail"] == "You have already submitted an application for this event"
        assert len(session.exec(select(Application)).all()) == 1
        assert len(sent_emails) == 1

    def test_closed_event_rejects_applications(self, client, session):
        event = make_event(session, status="closed")
        response = client.post("/api/v1/applications/", data=_form(event.id))
        assert response.status_code == 409

    def test_draft_event_rejects_applications(self, client, session):
        event = make_event(session, status="draft")
        response = client.post("/api/v1/applications/", data=_form(event.id))
        assert response.status_code == 409

    def test_past_deadline_rejects_applications(self, client, session):
        event = make_event(session, application_deadline=datetime.utcnow() - timedelta(hours=1))
        response = client.post("/api/v1/applications/", data=_form(event.id))
        assert response.status_code == 409

    def test_unknown_event(self, client):
        response = client.post(
            "/api/v1/applications/", data=_form("00000000-0000-0000-0000-000000000000")
        )
        assert response.status_code == 404

    def test_invalid_phone(self, client, active_event):
        response = client.post("/api/v1/applications/", data=_form(active_event.id, phone="12"))
        assert response.status_code == 422

    def test_too_many_categories(self, client, active_event):
        categories = ["jewelry", "art", "clothing", "home_decor", "other", "pet_products"]
        response = client.post(
            "/api/v1/applications/", data=_form(active_event.id, product_categories=categories)
        )
        assert response.status_code == 422

    def test_invalid_file_type_writes_nothing(self, client, session, storage, active_event):
        response = client.post(
            "/api/v1/applications/",
            data=_form(active_event.id),
            files=[
                ("files", ("ok.png", PNG_BYTES, "image/png")),
                ("files", ("script.exe", b"MZ", "application/octet-stream")),
            ],
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid file type: application/octet-stream")
        assert session.exec(select(Application)).all() == []
        assert not (storage.root / "applications").exists()

    def test_signed_in_vendor_is_linked(self, client, session, active_event, vendor_user, vendor_headers):
        response = client.post(
            "/api/v1/applications/",
            data=_form(active_event.id, email=vendor_user.email),
            headers=vendor_headers,
        )

        assert response.status_code == 201
        session.expire_all()
        vendor = session.get(Vendor, UUID(response.json()["vendor_id"]))
        assert vendor.user_id == vendor_user.id
        assert session.get(UserProfile, vendor_user.id).vendor_id == vendor.id

    def test_signed_in_user_cannot_claim_another_vendor(
        self, client, session, active_event, vendor_user, vendor_headers
    ):
        victim = make_vendor(session, email="victim@example.com")
        victim_application = make_application(session, make_event(session, name="Spring Fair"), victim)

        response = client.post(
            "/api/v1/applications/",
            data=_form(active_event.id, email="victim@example.com"),
            headers=vendor_headers,
        )

        assert response.status_code == 201
        session.expire_all()
        assert session.get(Vendor, victim.id).user_id is None
        dashboard = client.get("/api/v1/vendor/dashboard", headers=vendor_headers).json()
        assert dashboard["vendor"] is None
        assert client.get(
            f"/api/v1/applications/{victim_application.id}", headers=vendor_headers
        ).status_code == 403

        signup = client.post(
            "/api/v1/auth/signup",
            json={"email": "victim@example.com", "password": "secret123", "confirm_password": "secret123"},
        )
        assert signup.status_code == 201
        session.expire_all()
        assert session.get(Vendor, victim.id).user_id == UUID(signup.json()["id"])


class TestReviewApplications:
    def test_list_is_paginated_newest_first(self, client, session, organizer_headers):
        event = make_event(session)
        now = datetime.utcnow()
        for index in range(12):
            vendor = make_vendor(session, email=f"v{index}@example.com", business_name=f"Shop {index}")
            make_application(session, event, vendor, submitted_at=now - timedelta(minutes=index))

        response = client.get("/api/v1/applications/?page=1&page_size=10", headers=organizer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 12
        assert data["total_pages"] == 2
        assert len(data["items"]) == 10
        assert data["items"][0]["vendor"]["business_name"] == "Shop 0"

        second = client.get("/api/v1/applications/?page=2", headers=organizer_headers).json()
        assert [item["vendor"]["business_name"] for item in second["items"]] == ["Shop 10", "Shop 11"]

    def test_filters_and_search(self, client, session, organizer_headers):
        event = make_event(session)
        other_event = make_event(session, name="Summer Fair")
        baker = make_vendor(session, email="baker@example.com", business_name="Sunrise Bakery")
        potter = make_vendor(session, email="potter@example.com", business_name="Clay Works")
        make_application(session, event, baker, status="approved")
        make_application(session, other_event, potter)

        by_status = client.get("/api/v1/applications/?status=approved", headers=organizer_headers).json()
        assert [i["vendor"]["email"] for i in by_status["items"]] == ["baker@example.com"]

        by_event = client.get(
            f"/api/v1/applications/?event_id={other_event.id}", headers=organizer_headers
        ).json()
        assert [i["vendor"]["email"] for i in by_event["items"]] == ["potter@example.com"]

        by_search = client.get("/api/v1/applications/?search=BAKERY", headers=organizer_headers).json()
        assert by_search["total"] == 1

    def test_vendor_cannot_list(self, client, vendor_headers):
        assert client.get("/api/v1/applications/", headers=vendor_headers).status_code == 403

    def test_counts(self, client, session, organizer_headers):
        event = make_event(session)
        for index, status in enumerate(["pending", "pending", "approved", "waitlisted"]):
            make_application(session, event, make_vendor(session, email=f"c{index}@example.com"), status=status)

        response = client.get(f"/api/v1/applications/counts?event_id={event.id}", headers=organizer_headers)

        assert response.json() == {
            "total": 4,
            "pending": 2,
            "approved": 1,
            "rejected": 0,
            "waitlisted": 1,
        }

    def test_read_one_as_organizer_includes_notes(self, client, session, organizer_headers):
        event = make_event(session)
        application = make_application(session, event, make_vendor(session), organizer_notes="Great fit")

        response = client.get(f"/api/v1/applications/{application.id}", headers=organizer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["organizer_notes"] == "Great fit"
        assert data["vendor"]["email"] == "sarah@example.com"
        assert data["event"]["id"] == str(event.id)

    def test_owning_vendor_sees_application_without_notes(self, client, session, vendor_user, vendor_headers):
        event = make_event(session)
        vendor = make_vendor(session, email=vendor_user.email, user_id=vendor_user.id)
        application = make_application(session, event, vendor, organizer_notes="Internal")

        response = client.get(f"/api/v1/applications/{application.id}", headers=vendor_headers)

        assert response.status_code == 200
        assert response.json()["organizer_notes"] is None

    def test_other_vendor_is_forbidden(self, client, session):
        event = make_event(session)
        application = make_application(session, event, make_vendor(session))
        stranger = create_user(session, "stranger@example.com")

        response = client.get(f"/api/v1/applications/{application.id}", headers=auth_headers(stranger))

        assert response.status_code == 403


class TestStatusAndNotes:
    def test_status_change_sends_one_email_with_notes(self, client, session, organizer_headers, sent_emails):
        event = make_event(session)
        application = make_application(session, event, make_vendor(session), organizer_notes="See you there")
        previous_updated_at = application.updated_at

        response = client.patch(
            f"/api/v1/applications/{application.id}/status",
            json={"status": "approved"},
            headers=organizer_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        session.expire_all()
        assert session.get(Application, application.id).updated_at > previous_updated_at

        assert len(sent_emails) == 1
        assert sent_emails[0]["subject"] == (
            f"Congratulations! Your Application Has Been Approved - {event.name}"
        )
        assert "your vendor application has been approved" in sent_emails[0]["html"]
        assert "See you there" in sent_emails[0]["text"]

    def test_any_status_to_any_status(self, client, session, organizer_headers, sent_emails):
        event = make_event(session)
        application = make_application(session, event, make_vendor(session), status="rejected")

        for status in ("approved", "pending", "waitlisted", "waitlisted"):
            response = client.patch(
                f"/api/v1/applications/{application.id}/status",
                json={"status": status},
                headers=organizer_headers,
            )
            assert response.status_code == 200
            assert response.json()["status"] == status

        assert len(sent_emails) == 4

    def test_email_failure_does_not_undo_status_change(
        self, client, session, organizer_headers, monkeypatch
    ):
        def broken_send(*args, **kwargs):
            raise RuntimeError("smtp exploded")

        monkeypatch.setattr("vendor_market.services.notifications.send_email", broken_send)
        event = make_event(session)
        application = make_application(session, event, make_vendor(session))

        response = client.patch(
            f"/api/v1/applications/{application.id}/status",
            json={"status": "rejected"},
            headers=organizer_headers,
        )

        assert response.status_code == 200
        session.expire_all()
        assert session.get(Application, application.id).status == "rejected"

    def test_invalid_status(self, client, session, organizer_headers):
        event = make_event(session)
        application = make_application(session, event, make_vendor(session))
        response = client.patch(
            f"/api/v1/applications/{application.id}/status",
            json={"status": "maybe"},
            headers=organizer_headers,
        )
        assert response.status_code == 422

    def test_vendor_cannot_change_status(self, client, session, vendor_headers, sent_emails):
        event = make_event(session)
        application = make_application(session, event, make_vendor(session))
        response = client.patch(
            f"/api/v1/applications/{application.id}/status",
            json={"status": "approved"},
            headers=vendor_headers,
        )
        assert response.status_code == 403
        assert sent_emails == []

    def test_notes_update_sends_no_email(self, client, session, organizer_headers, sent_emails):
        event = make_event(session)
        application = make_application(session, event, make_vendor(session))

        response = client.patch(
            f"/api/v1/applications/{application.id}/notes",
            json={"organizer_notes": "Bring extra tables"},
            headers=organizer_headers,
        )

        assert response.status_code == 200
        assert response.json()["organizer_notes"] == "Bring extra tables"
        assert sent_emails == []
