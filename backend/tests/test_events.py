from datetime import datetime, timedelta

from tests.utils import make_application, make_event, make_vendor
from vendor_market.models import Event


def _event_payload(**overrides):
    event_date = datetime.utcnow() + timedelta(days=45)
    payload = {
        "name": "Spring Makers Fair",
        "event_date": event_date.isoformat(),
        "location": "Riverside Park",
        "description": "Local makers and food trucks",
        "application_deadline": (event_date - timedelta(days=14)).isoformat(),
        "max_vendors": 40,
    }
    payload.update(overrides)
    return payload


class TestEventCrud:
    def test_create_event_starts_as_draft(self, client, organizer_headers):
        response = client.post("/api/v1/events/", json=_event_payload(), headers=organizer_headers)

        assert response.status_code == 201
        assert response.json()["status"] == "draft"

    def test_vendor_cannot_create_event(self, client, vendor_headers):
        response = client.post("/api/v1/events/", json=_event_payload(), headers=vendor_headers)
        assert response.status_code == 403

    def test_anonymous_cannot_create_event(self, client):
        response = client.post("/api/v1/events/", json=_event_payload())
        assert response.status_code == 401

    def test_deadline_after_event_date_is_rejected(self, client, organizer_headers):
        event_date = datetime.utcnow() + timedelta(days=10)
        payload = _event_payload(
            event_date=event_date.isoformat(),
            application_deadline=(event_date + timedelta(days=1)).isoformat(),
        )
        response = client.post("/api/v1/events/", json=payload, headers=organizer_headers)
        assert response.status_code == 422

    def test_max_vendors_bounds(self, client, organizer_headers):
        response = client.post(
            "/api/v1/events/", json=_event_payload(max_vendors=0), headers=organizer_headers
        )
        assert response.status_code == 422

    def test_update_event(self, client, session, organizer_headers):
        event = make_event(session, status="draft")
        response = client.put(
            f"/api/v1/events/{event.id}",
            json=_event_payload(name="Renamed Fair"),
            headers=organizer_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed Fair"
        assert response.json()["status"] == "draft"

    def test_list_events_includes_application_counts(self, client, session, organizer_headers):
        event = make_event(session)
        make_application(session, event, make_vendor(session))

        response = client.get("/api/v1/events/", headers=organizer_headers)

        assert response.status_code == 200
        listed = {item["id"]: item for item in response.json()}
        assert listed[str(event.id)]["application_count"] == 1


class TestEventVisibility:
    def test_open_events_excludes_drafts_and_past_deadlines(self, client, session):
        open_event = make_event(session, name="Open Market")
        make_event(session, name="Draft Market", status="draft")
        make_event(
            session,
            name="Late Market",
            application_deadline=datetime.utcnow() - timedelta(days=1),
        )
        no_deadline = make_event(session, name="Rolling Market", application_deadline=None)

        response = client.get("/api/v1/events/open")

        assert response.status_code == 200
        ids = {item["id"] for item in response.json()}
        assert ids == {str(open_event.id), str(no_deadline.id)}

    def test_draft_event_hidden_from_public(self, client, session, organizer_headers):
        draft = make_event(session, status="draft")

        assert client.get(f"/api/v1/events/{draft.id}").status_code == 404
        assert client.get(f"/api/v1/events/{draft.id}", headers=organizer_headers).status_code == 200


class TestEventStatus:
    def test_publish_then_close(self, client, session, organizer_headers):
        event = make_event(session, status="draft")

        published = client.patch(
            f"/api/v1/events/{event.id}/status", json={"status": "active"}, headers=organizer_headers
        )
        assert published.status_code == 200
        assert published.json()["status"] == "active"

        closed = client.patch(
            f"/api/v1/events/{event.id}/status", json={"status": "closed"}, headers=organizer_headers
        )
        assert closed.status_code == 200
        assert closed.json()["status"] == "closed"

    def test_illegal_transitions_are_rejected_without_write(self, client, session, organizer_headers):
        event = make_event(session, status="draft")
        updated_at = event.updated_at

        response = client.patch(
            f"/api/v1/events/{event.id}/status", json={"status": "closed"}, headers=organizer_headers
        )

        assert response.status_code == 409
        session.expire_all()
        refreshed = session.get(Event, event.id)
        assert refreshed.status == "draft"
        assert refreshed.updated_at == updated_at

    def test_closed_is_terminal(self, client, session, organizer_headers):
        event = make_event(session, status="closed")
        for target in ("draft", "active", "closed"):
            response = client.patch(
                f"/api/v1/events/{event.id}/status", json={"status": target}, headers=organizer_headers
            )
            assert response.status_code == 409

    def test_cannot_revert_to_draft(self, client, session, organizer_headers):
        event = make_event(session, status="active")
        response = client.patch(
            f"/api/v1/events/{event.id}/status", json={"status": "draft"}, headers=organizer_headers
        )
        assert response.status_code == 409


class TestEventDelete:
    def test_delete_event_without_applications(self, client, session, organizer_headers):
        event_id = make_event(session).id

        response = client.delete(f"/api/v1/events/{event_id}", headers=organizer_headers)

        assert response.status_code == 204
        session.expire_all()
        assert session.get(Event, event_id) is None

    def test_delete_event_with_applications_conflicts(self, client, session, organizer_headers):
        event = make_event(session)
        make_application(session, event, make_vendor(session))

        response = client.delete(f"/api/v1/events/{event.id}", headers=organizer_headers)

        assert response.status_code == 409
        assert 'Set the status to "Closed" instead.' in response.json()["detail"]
        assert "1 application(s)" in response.json()["detail"]
