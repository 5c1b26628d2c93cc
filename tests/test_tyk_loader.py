import json

import pytest
import requests

from apimigrate.exceptions import DestinationError
from apimigrate.loaders.tyk_loader import TykLoader
from apimigrate.models.record import ApiRecord

from conftest import FakeResponse, FakeSession, swagger_document

LISTING = {
    "apis": [
        {
            "api_definition": {
                "api_id": "a1",
                "name": "Orders API",
                "proxy": {"listen_path": "/orders", "target_url": "http://orders:8080"},
            },
        },
        {"api_definition": {"api_id": "a2", "name": "Legacy", "proxy": {"listen_path": None}}},
    ],
    "pages": 1,
}


def make_record(**kwargs):
    document = swagger_document(**kwargs)
    return ApiRecord(
        name=document["info"]["title"],
        listen_path=document["x-wso2-basePath"],
        target_url=document["x-wso2-production-endpoints"]["urls"][0],
        raw_document=json.dumps(document),
        source_file="admin_Orders_1.0.0.zip",
    )


def make_loader(session, **kwargs):
    return TykLoader("http://tyk:3000/", "token-123", session=session, **kwargs)


def test_session_uses_raw_token_header():
    loader = TykLoader("http://tyk:3000", "token-123")

    assert loader._session.headers["Authorization"] == "token-123"
    assert loader._session.verify is False


def test_validate_connection_requires_200():
    assert make_loader(FakeSession(get_responses=[FakeResponse(200, LISTING)])).validate_connection()
    assert not make_loader(FakeSession(get_responses=[FakeResponse(401, {"Message": "Not authorised"})])).validate_connection()


def test_validate_connection_handles_transport_errors():
    session = FakeSession(get_responses=[requests.ConnectionError("refused")])

    assert not make_loader(session).validate_connection()


def test_list_existing_requests_single_page():
    session = FakeSession(get_responses=[FakeResponse(200, LISTING)])

    existing = make_loader(session, timeout=5).list_existing()

    assert session.calls[0]["url"] == "http://tyk:3000/api/apis"
    assert session.calls[0]["params"] == {"p": -1}
    assert session.calls[0]["timeout"] == 5
    assert [(e.id, e.name, e.listen_path, e.target_url) for e in existing] == [
        ("a1", "Orders API", "/orders", "http://orders:8080"),
        ("a2", "Legacy", None, None),
    ]


@pytest.mark.parametrize("response", [
    FakeResponse(500, {"Status": "Error"}),
    FakeResponse(200, None, text="<html>"),
    requests.Timeout("timed out"),
])
def test_list_existing_failures_raise_destination_error(response):
    with pytest.raises(DestinationError, match="Could not list Tyk APIs"):
        make_loader(FakeSession(get_responses=[response])).list_existing()


def test_load_record_posts_document_with_query_params():
    session = FakeSession(post_responses=[FakeResponse(200, {"Status": "OK", "Message": "API created", "Meta": "abc"})])
    record = make_record(base_path="/orders", url="http://orders:8080/v1")

    result = make_loader(session).load_record(record)

    call = session.calls[0]
    assert call["url"] == "http://tyk:3000/api/apis/oas/import"
    assert call["params"] == {"listenPath": "/orders", "upstreamURL": "http://orders:8080/v1"}
    assert call["data"] == record.raw_document.encode("utf-8")
    assert call["headers"] == {"Content-Type": "application/json"}
    assert result.success
    assert result.target_id == "abc"


def test_query_params_are_url_encoded():
    prepared = requests.Request(
        "POST",
        "http://tyk:3000/api/apis/oas/import",
        params={"listenPath": "/orders api", "upstreamURL": "http://orders:8080/v1?a=b"},
    ).prepare()

    assert "listenPath=%2Forders+api" in prepared.url
    assert "upstreamURL=http%3A%2F%2Forders%3A8080%2Fv1%3Fa%3Db" in prepared.url


def test_load_record_non_ok_status_surfaces_message():
    session = FakeSession(post_responses=[FakeResponse(400, {"Status": "Error", "Message": "listen path taken"})])

    result = make_loader(session).load_record(make_record())

    assert not result.success
    assert result.message == "listen path taken"


def test_load_record_non_json_response_fails():
    session = FakeSession(post_responses=[FakeResponse(502, None, text="Bad Gateway")])

    result = make_loader(session).load_record(make_record())

    assert not result.success
    assert result.message == "HTTP 502: Bad Gateway"


def test_load_record_transport_error_fails():
    session = FakeSession(post_responses=[requests.ConnectionError("reset")])

    result = make_loader(session).load_record(make_record())

    assert not result.success
    assert "reset" in result.message


def test_dry_run_does_not_post():
    session = FakeSession()

    result = make_loader(session, dry_run=True).load_record(make_record())

    assert result.success
    assert session.calls == []
