from __future__ import annotations

from typing import Any, List

import pytest
import requests

from teamhub.airtable import AirtableClient, AirtableError


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, invalid_json: bool = False) -> None:
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload


class FakeSession:
    def __init__(self, responses: List[Any]) -> None:
        self.headers: dict = {}
        self.responses = list(responses)
        self.requests: List[tuple] = []

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, kwargs))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def _client(*responses) -> tuple[AirtableClient, FakeSession]:
    session = FakeSession(list(responses))
    return AirtableClient("pat-token", "appBase", session=session), session


def test_client_sets_bearer_auth():
    client, session = _client()

    assert session.headers["Authorization"] == "Bearer pat-token"


def test_list_records_follows_pagination():
    client, session = _client(
        FakeResponse(200, {"records": [{"id": "rec1"}], "offset": "itr1"}),
        FakeResponse(200, {"records": [{"id": "rec2"}]}),
    )

    records = client.list_records("Events", filterByFormula="{Date} = '2026-02-24'", view=None)

    assert [r["id"] for r in records] == ["rec1", "rec2"]
    assert session.requests[0][1] == "https://api.airtable.com/v0/appBase/Events"
    assert session.requests[0][2]["params"] == {"filterByFormula": "{Date} = '2026-02-24'"}
    assert session.requests[1][2]["params"]["offset"] == "itr1"


def test_list_records_serializes_sort_and_stops_at_max_records():
    client, session = _client(FakeResponse(200, {"records": [{"id": "m1"}], "offset": "itr1"}))

    client.list_records("Messages", sort=[{"field": "CreatedAt", "direction": "desc"}], maxRecords=50)

    params = session.requests[0][2]["params"]
    assert params["sort"] == '[{"field": "CreatedAt", "direction": "desc"}]'
    assert len(session.requests) == 1


def test_table_names_are_url_encoded():
    client, session = _client(FakeResponse(200, {"records": []}))

    client.list_records("Daily Check Ins")

    assert session.requests[0][1].endswith("/Daily%20Check%20Ins")


def test_create_update_delete_requests():
    client, session = _client(
        FakeResponse(200, {"id": "rec9", "fields": {"Title": "x"}}),
        FakeResponse(200, {"id": "rec9", "fields": {"Title": "y"}}),
        FakeResponse(200, {"id": "rec9", "deleted": True}),
    )

    assert client.create_record("Events", {"Title": "x"})["id"] == "rec9"
    client.update_record("Events", "rec9", {"Title": "y"})
    client.delete_record("Events", "rec9")

    methods = [(m, url.rsplit("/", 1)[-1], kw.get("json")) for m, url, kw in session.requests]
    assert methods == [
        ("POST", "Events", {"fields": {"Title": "x"}}),
        ("PATCH", "rec9", {"fields": {"Title": "y"}}),
        ("DELETE", "rec9", None),
    ]


def test_error_message_comes_from_response_body():
    client, _ = _client(FakeResponse(422, {"error": {"type": "INVALID_VALUE", "message": "Field 'Date' is invalid"}}))

    with pytest.raises(AirtableError) as excinfo:
        client.create_record("Events", {"Date": "soon"})

    assert excinfo.value.status == 422
    assert str(excinfo.value) == "Field 'Date' is invalid"


def test_error_without_json_body_uses_status():
    client, _ = _client(FakeResponse(503, invalid_json=True))

    with pytest.raises(AirtableError, match="Airtable error: 503"):
        client.delete_record("Events", "rec1")


def test_network_error_is_wrapped():
    client, _ = _client(requests.ConnectionError("boom"))

    with pytest.raises(AirtableError) as excinfo:
        client.list_records("Events")

    assert excinfo.value.status is None


@pytest.mark.parametrize(
    "response, expected",
    [
        (FakeResponse(200, {"records": []}), None),
        (FakeResponse(401, {"error": "AUTHENTICATION_REQUIRED"}), "Invalid API key"),
        (FakeResponse(404, {"error": "NOT_FOUND"}), "Base not found - check your Base ID"),
        (FakeResponse(422, {}), "TeamMembers table not found - please create it in Airtable"),
        (FakeResponse(500, {}), "Unexpected error: 500"),
        (requests.Timeout("slow"), "Network error - check your connection"),
    ],
)
def test_test_connection_maps_failures(response, expected):
    client, session = _client(response)

    status = client.test_connection()

    assert status.ok is (expected is None)
    assert status.error == expected
    assert session.requests[0][2]["params"] == {"maxRecords": 1}


def test_test_connection_requires_credentials():
    client = AirtableClient("", "appBase", session=FakeSession([]))

    status = client.test_connection()

    assert status.ok is False
    assert status.error == "API key and Base ID are required"
