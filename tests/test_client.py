"""Tests for TerraformClient: auth headers, pagination, throttling, no retries."""

from unittest.mock import patch

import pytest
import requests
import responses

from tfve.client import TerraformClient
from tfve.models import ConnectionSettings, RemoteVariable

from conftest import MOCK_API_URL, MOCK_BASE_URL, MOCK_ORG, make_variable, make_workspace, request_body


class TestRequests:
    @responses.activate
    def test_headers(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/workspaces/ws-1/vars", json={"data": []})

        mock_client.list_variables("ws-1")

        headers = responses.calls[0].request.headers
        assert headers["Authorization"] == "Bearer test-token"
        assert headers["Content-Type"] == "application/vnd.api+json"

    def test_trailing_slash_in_base_url(self):
        client = TerraformClient(ConnectionSettings(f"{MOCK_BASE_URL}/", MOCK_ORG, "t"))
        assert client.api_url == MOCK_API_URL

    def test_token_not_in_repr(self, settings):
        assert "test-token" not in repr(settings)

    @responses.activate
    def test_server_error_is_not_retried(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/workspaces/ws-1/vars", status=503)
        responses.add(responses.GET, f"{MOCK_API_URL}/workspaces/ws-1/vars", json={"data": []})

        with pytest.raises(requests.HTTPError):
            mock_client.list_variables("ws-1")
        assert len(responses.calls) == 1

    @responses.activate
    def test_unauthorized_raises(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/workspaces/ws-1/vars", status=401)

        with pytest.raises(requests.HTTPError) as exc_info:
            mock_client.list_variables("ws-1")
        assert exc_info.value.response.status_code == 401


class TestThrottle:
    """Client-side rate limiting."""

    def test_sleeps_between_fast_requests(self, settings):
        client = TerraformClient(settings, rate_limit=20)

        with patch("tfve.client.time.monotonic", side_effect=[100.0, 100.01, 100.05]), patch(
            "tfve.client.time.sleep"
        ) as mock_sleep:
            client._throttle()
            client._throttle()

        mock_sleep.assert_called_once()
        assert mock_sleep.call_args[0][0] == pytest.approx(0.04)

    def test_no_sleep_when_spaced_out(self, settings):
        client = TerraformClient(settings, rate_limit=20)

        with patch("tfve.client.time.monotonic", side_effect=[100.0, 101.0]), patch(
            "tfve.client.time.sleep"
        ) as mock_sleep:
            client._throttle()
            client._throttle()

        mock_sleep.assert_not_called()

    def test_disabled(self, mock_client):
        with patch("tfve.client.time.sleep") as mock_sleep:
            for _ in range(5):
                mock_client._throttle()
        mock_sleep.assert_not_called()


class TestPagination:
    @responses.activate
    def test_follows_next_page(self, mock_client):
        url = f"{MOCK_API_URL}/organizations/{MOCK_ORG}/workspaces"
        responses.add(
            responses.GET,
            url,
            json={"data": [make_workspace("ws-1", "a")], "meta": {"pagination": {"current-page": 1, "next-page": 2}}},
        )
        responses.add(
            responses.GET,
            url,
            json={"data": [make_workspace("ws-2", "b")], "meta": {"pagination": {"current-page": 2, "next-page": None}}},
        )

        result = mock_client.list_workspaces()

        assert [ws["id"] for ws in result] == ["ws-1", "ws-2"]
        assert len(responses.calls) == 2
        assert "page%5Bnumber%5D=2" in responses.calls[1].request.url
        assert "page%5Bsize%5D=100" in responses.calls[1].request.url

    @responses.activate
    def test_single_page_without_meta(self, mock_client):
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/organizations/{MOCK_ORG}/projects",
            json={"data": [{"id": "prj-1", "type": "projects", "attributes": {"name": "Default Project"}}]},
        )

        projects = mock_client.list_projects()

        assert [(p.id, p.name) for p in projects] == [("prj-1", "Default Project")]
        assert len(responses.calls) == 1


class TestVariables:
    @responses.activate
    def test_resolve_workspace(self, mock_client):
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/organizations/{MOCK_ORG}/workspaces/app-prod",
            json={"data": make_workspace("ws-1", "app-prod")},
        )

        ws = mock_client.resolve_workspace("app-prod")

        assert (ws.id, ws.name) == ("ws-1", "app-prod")

    @responses.activate
    def test_get_variable(self, mock_client):
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/workspaces/ws-1/vars",
            json={
                "data": [
                    make_variable("var-1", "region", "eu-west-1"),
                    make_variable("var-2", "tags", '{"a":"b"}', hcl=True, description="Common tags"),
                ]
            },
        )

        var = mock_client.get_variable("ws-1", "tags")

        assert var == RemoteVariable(
            id="var-2",
            name="tags",
            value='{"a":"b"}',
            description="Common tags",
            is_hcl=True,
            sensitive=False,
            category="terraform",
        )

    @responses.activate
    def test_get_variable_absent(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/workspaces/ws-1/vars", json={"data": []})
        assert mock_client.get_variable("ws-1", "region") is None

    @responses.activate
    def test_create_variable_without_description(self, mock_client):
        responses.add(
            responses.POST,
            f"{MOCK_API_URL}/workspaces/ws-1/vars",
            json={"data": make_variable("var-3", "region", "eu-west-1")},
            status=201,
        )

        var = mock_client.create_variable("ws-1", "region", "eu-west-1", hcl=False)

        assert var.id == "var-3"
        body = request_body(responses.calls[0])
        assert body["data"]["type"] == "vars"
        assert "description" not in body["data"]["attributes"]

    @responses.activate
    def test_update_variable(self, mock_client):
        responses.add(
            responses.PATCH,
            f"{MOCK_API_URL}/workspaces/ws-1/vars/var-3",
            json={"data": make_variable("var-3", "region", "us-east-1", description="Region")},
        )

        var = mock_client.update_variable("ws-1", "var-3", "us-east-1", hcl=False, description="Region")

        assert var.value == "us-east-1"
        assert request_body(responses.calls[0]) == {
            "data": {
                "type": "vars",
                "id": "var-3",
                "attributes": {"value": "us-east-1", "hcl": False, "description": "Region"},
            }
        }
