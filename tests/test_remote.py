"""Tests for the check-in endpoint client and server contract."""
from unittest.mock import MagicMock

import pytest
import requests

from gradpass.core.errors import MalformedResponse, RemoteUnavailable
from gradpass.remote.client import CheckInClient, SubmitResult
from gradpass.remote.contract import InMemoryCheckInStore, validate_checkin_body

ENDPOINT = "http://checkins.test/api/checkins"


def _response(status: int = 200, body=None, json_error: bool = False) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.text = "" if body is None else str(body)
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body
    return response


class TestValidateBody:
    """Test endpoint request validation."""

    def test_valid_body(self, make_payload):
        assert validate_checkin_body(make_payload(1)) == []

    def test_operator_and_id_optional(self, make_payload):
        payload = make_payload(1)
        del payload["operator"]

        assert validate_checkin_body(payload) == []

    def test_missing_fields(self):
        errors = validate_checkin_body({})

        assert errors == [
            "inviteeId is required.",
            "ceremonyId is required.",
            "ticketCode is required.",
            "scannedAt is required.",
            "source is required.",
        ]

    def test_invalid_date(self, make_payload):
        errors = validate_checkin_body(make_payload(1, scanned_at="yesterday"))

        assert errors == ["scannedAt must be a valid date."]

    def test_invalid_source(self, make_payload):
        errors = validate_checkin_body(make_payload(1, source="turnstile"))

        assert errors == ["source is invalid."]

    def test_non_object_body(self):
        assert validate_checkin_body(["inviteeId"]) == ["body must be a JSON object."]


class TestInMemoryStore:
    """Test the reference store semantics."""

    def test_insert_uses_client_id(self, store, make_payload):
        status, body = store.handle_post({**make_payload(1), "id": "client-key"})

        assert status == 200
        assert body == {"ok": True, "duplicate": False, "id": "client-key"}

    def test_insert_assigns_id(self, store, make_payload):
        status, body = store.handle_post(make_payload(1))

        assert status == 200
        assert body["id"]

    def test_duplicate_returns_existing_id(self, store, make_payload):
        _, first = store.handle_post({**make_payload(1), "id": "first"})
        status, second = store.handle_post({**make_payload(1, scanned_at="2026-06-20T16:00:00Z"), "id": "second"})

        assert status == 200
        assert second == {"ok": True, "duplicate": True, "id": "first"}
        assert store.count() == 1

    def test_duplicate_scoped_by_ceremony(self, store, make_payload):
        store.handle_post(make_payload(1))
        _, body = store.handle_post(make_payload(1, ceremony_id="CER-OTHER"))

        assert body["duplicate"] is False
        assert store.count() == 2

    def test_invalid_body_is_400(self, store):
        status, body = store.handle_post({"inviteeId": "inv-1"})

        assert status == 400
        assert "ceremonyId is required." in body["error"]

    def test_listing_newest_first(self, store, make_payload):
        store.handle_post(make_payload(1, scanned_at="2026-06-20T15:00:00Z"))
        store.handle_post(make_payload(2, scanned_at="2026-06-20T15:05:00Z"))
        store.handle_post(make_payload(3, ceremony_id="CER-OTHER"))

        status, body = store.handle_get("CER-2026")

        assert status == 200
        assert body["ok"] is True
        assert [item["ticketCode"] for item in body["items"]] == ["T-2", "T-1"]

    def test_listing_requires_ceremony(self, store):
        status, body = store.handle_get(None)

        assert status == 400
        assert "ceremonyId" in body["error"]


class TestCheckInClient:
    """Test HTTP error mapping with a mocked session."""

    def test_submit_confirmed(self, mock_session, make_payload):
        mock_session.post.return_value = _response(200, {"ok": True, "id": "abc"})
        client = CheckInClient(ENDPOINT, timeout=5.0, session=mock_session)
        payload = make_payload(1)

        result = client.submit(payload)

        assert result == SubmitResult(id="abc", duplicate=False)
        mock_session.post.assert_called_once()
        args, kwargs = mock_session.post.call_args
        assert args == (ENDPOINT,)
        assert kwargs["json"] == payload
        assert kwargs["timeout"] == 5.0

    def test_submit_duplicate(self, mock_session, make_payload):
        mock_session.post.return_value = _response(200, {"ok": True, "duplicate": True, "id": "abc"})
        client = CheckInClient(ENDPOINT, session=mock_session)

        assert client.submit(make_payload(1)).duplicate is True

    def test_defaults_from_config(self, mock_session):
        client = CheckInClient(session=mock_session)

        assert client.endpoint == ENDPOINT
        assert client.timeout > 0

    def test_transport_error(self, mock_session, make_payload):
        mock_session.post.side_effect = requests.ConnectionError("connection refused")
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(RemoteUnavailable) as excinfo:
            client.submit(make_payload(1))
        assert excinfo.value.status is None

    def test_timeout(self, mock_session, make_payload):
        mock_session.post.side_effect = requests.Timeout("read timed out")
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(RemoteUnavailable):
            client.submit(make_payload(1))

    def test_server_error_carries_message(self, mock_session, make_payload):
        mock_session.post.return_value = _response(500, {"error": "database down"})
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(RemoteUnavailable) as excinfo:
            client.submit(make_payload(1))
        assert excinfo.value.status == 500
        assert "database down" in str(excinfo.value)
        assert not isinstance(excinfo.value, MalformedResponse)

    def test_error_body_not_json(self, mock_session, make_payload):
        response = _response(502, json_error=True)
        response.text = "Bad Gateway"
        mock_session.post.return_value = response
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(RemoteUnavailable, match="Bad Gateway"):
            client.submit(make_payload(1))

    def test_non_json_success_is_malformed(self, mock_session, make_payload):
        mock_session.post.return_value = _response(200, json_error=True)
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(MalformedResponse):
            client.submit(make_payload(1))

    def test_ok_false_is_malformed(self, mock_session, make_payload):
        mock_session.post.return_value = _response(200, {"ok": False, "id": "abc"})
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(MalformedResponse):
            client.submit(make_payload(1))

    def test_missing_id_is_malformed(self, mock_session, make_payload):
        mock_session.post.return_value = _response(200, {"ok": True})
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(MalformedResponse):
            client.submit(make_payload(1))

    def test_list_body_is_malformed(self, mock_session, make_payload):
        mock_session.post.return_value = _response(200, [{"ok": True}])
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(MalformedResponse):
            client.submit(make_payload(1))

    def test_list_checkins(self, mock_session):
        item = {
            "id": "abc",
            "inviteeId": "inv-1",
            "ceremonyId": "CER-2026",
            "ticketCode": "T-1",
            "scannedAt": "2026-06-20T15:00:00Z",
            "source": "manual",
            "operator": None,
        }
        mock_session.get.return_value = _response(200, {"ok": True, "items": [item]})
        client = CheckInClient(ENDPOINT, session=mock_session)

        records = client.list_checkins("CER-2026")

        assert len(records) == 1
        assert records[0].invitee_id == "inv-1"
        assert records[0].source == "manual"
        assert mock_session.get.call_args.kwargs["params"] == {"ceremonyId": "CER-2026"}

    def test_list_without_items_is_malformed(self, mock_session):
        mock_session.get.return_value = _response(200, {"ok": True})
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(MalformedResponse):
            client.list_checkins("CER-2026")

    def test_list_item_missing_field_is_malformed(self, mock_session):
        mock_session.get.return_value = _response(200, {"ok": True, "items": [{"id": "abc"}]})
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(MalformedResponse):
            client.list_checkins("CER-2026")

    def test_list_server_error(self, mock_session):
        mock_session.get.return_value = _response(400, {"error": "ceremonyId is required in the query."})
        client = CheckInClient(ENDPOINT, session=mock_session)

        with pytest.raises(RemoteUnavailable) as excinfo:
            client.list_checkins("")
        assert excinfo.value.status == 400


def test_store_round_trip_through_loopback(make_payload):
    """LoopbackClient speaks the same contract as the HTTP client."""
    from gradpass.remote.loopback import LoopbackClient

    store = InMemoryCheckInStore()
    client = LoopbackClient(store)

    first = client.submit(make_payload(1))
    second = client.submit(make_payload(1))

    assert first.duplicate is False
    assert second == SubmitResult(id=first.id, duplicate=True)
    assert [r.invitee_id for r in client.list_checkins("CER-2026")] == ["inv-1"]
