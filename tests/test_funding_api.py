import json
from unittest.mock import MagicMock

import pytest
import requests

import services.funding_api as funding_api
from services.funder_profiles import resolve_funder_profile
from services.funding_api import FundingApiClient, RemoteServiceError, get_funding_api_client

LONG_DOC = "<h4>Introduction</h4><p>" + "We are writing to request funding. " * 5 + "</p>"


def _client(json_body=None, json_error=None, post_error=None, min_chars=100):
    http = MagicMock()
    resp = MagicMock()
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = json_body
    if post_error is not None:
        http.post.side_effect = post_error
    else:
        http.post.return_value = resp
    return FundingApiClient("https://api.example.org/", min_document_chars=min_chars, session=http), http


def test_analyse_returns_non_null_fields():
    client, http = _client({"analysis": {"amount": "£10,000", "gaps": ["budget"], "reach": None}})
    facts = client.analyse("Comic Relief", "text", "draft")
    assert facts == {"amount": "£10,000", "gaps": ["budget"]}
    url = http.post.call_args.args[0]
    assert url == "https://api.example.org/analyse"
    assert http.post.call_args.kwargs["json"] == {"funderName": "Comic Relief", "userInput": "text", "mode": "draft"}


@pytest.mark.parametrize("body", [
    {},
    {"analysis": "not an object"},
    {"analysis": {"projectTypes": "Events"}},
    ["analysis"],
])
def test_analyse_rejects_bad_shapes(body):
    client, _ = _client(body)
    with pytest.raises(RemoteServiceError):
        client.analyse("Comic Relief", "text", "draft")


def test_transport_failure_is_remote_service_error():
    client, _ = _client(post_error=requests.exceptions.ConnectionError("down"))
    with pytest.raises(RemoteServiceError):
        client.analyse("Comic Relief", "text", "draft")


def test_non_json_body_is_remote_service_error():
    client, _ = _client(json_error=ValueError("no json"))
    with pytest.raises(RemoteServiceError):
        client.generate("Comic Relief", "text", "notes", {}, set(), resolve_funder_profile("Comic Relief"))


def test_generate_sends_answers_uncertainty_and_profile():
    client, http = _client({"document": LONG_DOC, "alignment": "<ul><li>ok</li></ul>"})
    profile = resolve_funder_profile("Comic Relief")
    doc = client.generate("Comic Relief", "text", "notes", {"amount": "£5"}, {"reach", "amount"}, profile)

    assert doc.document == LONG_DOC
    assert doc.alignment == "<ul><li>ok</li></ul>"
    assert http.post.call_args.args[0] == "https://api.example.org/generate"
    payload = http.post.call_args.kwargs["json"]
    assert payload["answers"] == {"amount": "£5"}
    assert payload["notSure"] == {"amount": True, "reach": True}
    assert payload["funderInfo"]["name"] == "Comic Relief"
    assert payload["funderInfo"]["values"] == profile.values


def test_generate_rejects_short_document():
    client, _ = _client({"document": "   too short   "})
    with pytest.raises(RemoteServiceError):
        client.generate("X", "text", "draft", {}, (), resolve_funder_profile("X"))


def test_generate_rejects_missing_document():
    client, _ = _client({"alignment": "<ul></ul>"})
    with pytest.raises(RemoteServiceError):
        client.generate("X", "text", "draft", {}, (), resolve_funder_profile("X"))


def test_generate_missing_alignment_is_empty():
    client, _ = _client({"document": LONG_DOC})
    assert client.generate("X", "text", "draft", {}, (), resolve_funder_profile("X")).alignment == ""


def test_client_requires_base_url():
    with pytest.raises(ValueError):
        FundingApiClient("")


def test_no_client_without_url(monkeypatch):
    monkeypatch.setattr(funding_api, "FUNDING_API_URL", "")
    monkeypatch.setattr(funding_api, "FUNDING_REMOTE_ENABLE", True)
    assert get_funding_api_client({"use_remote_service": True}) is None


def test_no_client_when_disabled(monkeypatch):
    monkeypatch.setattr(funding_api, "FUNDING_API_URL", "https://api.example.org")
    monkeypatch.setattr(funding_api, "FUNDING_REMOTE_ENABLE", True)
    assert get_funding_api_client({"use_remote_service": False}) is None
    monkeypatch.setattr(funding_api, "FUNDING_REMOTE_ENABLE", False)
    assert get_funding_api_client({"use_remote_service": True}) is None


def test_client_built_from_settings(monkeypatch):
    monkeypatch.setattr(funding_api, "FUNDING_API_URL", "https://api.example.org")
    monkeypatch.setattr(funding_api, "FUNDING_REMOTE_ENABLE", True)
    client = get_funding_api_client({"use_remote_service": True, "min_document_chars": 250})
    assert isinstance(client, FundingApiClient)
    assert client.min_document_chars == 250


def _status_client(status_code, json_body):
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = "https://api.example.org/"
    resp._content = json.dumps(json_body).encode("utf-8")
    http = MagicMock()
    http.post.return_value = resp
    return FundingApiClient("https://api.example.org", session=http)


def test_error_status_is_remote_service_error_for_analyse():
    client = _status_client(500, {"analysis": {"amount": "£1"}})
    with pytest.raises(RemoteServiceError):
        client.analyse("Comic Relief", "text", "draft")


def test_error_status_is_remote_service_error_for_generate():
    client = _status_client(503, {"document": LONG_DOC, "alignment": ""})
    with pytest.raises(RemoteServiceError):
        client.generate("Comic Relief", "text", "draft", {}, (), resolve_funder_profile("Comic Relief"))
