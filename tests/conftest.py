"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

CloudLink Test Double:
    FakeCloudLink is an in-memory CloudLink served through
    httpx.MockTransport. Clients built with the `client` fixture talk to it
    instead of the network, and every request is recorded so tests can
    assert on what was (or was not) sent.
"""

import json
from collections.abc import Generator
from urllib.parse import parse_qs, unquote

import httpx
import pytest

from cloudlink.client import CloudLinkClient
from cloudlink.core.config import CloudLinkClientConfig

TEST_SERVER_KEY = "test-server-key"


class FakeCloudLink:
    """In-memory CloudLink REST API (version 3)."""

    def __init__(self, server_key: str = TEST_SERVER_KEY) -> None:
        self.server_key = server_key
        self.objects: dict[str, str] = {}
        self.lists: dict[str, dict[str, str]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_with: tuple[int, str] | None = None
        self._push_counter = 0

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def request_count(self) -> int:
        return len(self.requests)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_with is not None:
            status, body = self.fail_with
            return httpx.Response(status, text=body)

        if request.headers.get("Authorization") != f"Gluon {self.server_key}":
            return httpx.Response(401, text="invalid server key")

        raw_path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        segments = [unquote(s) for s in raw_path.split("/") if s]
        if segments[:1] != ["3"]:
            return httpx.Response(404, text="unknown API version")
        segments = segments[1:]
        form = {
            key: values[0]
            for key, values in parse_qs(request.content.decode("utf-8")).items()
        }

        match segments:
            case ["push", "enterprise", "notification"]:
                return self._push(form)
            case ["data", "enterprise", "object", object_id]:
                return self._envelope(object_id, self.objects.get(object_id))
            case ["data", "enterprise", "object", object_id, "add"]:
                self.objects[object_id] = form["payload"]
                return self._envelope(object_id, form["payload"])
            case ["data", "enterprise", "object", object_id, "update"]:
                if object_id not in self.objects:
                    return httpx.Response(200, json={})
                self.objects[object_id] = form["payload"]
                return self._envelope(object_id, form["payload"])
            case ["data", "enterprise", "object", object_id, "remove"]:
                self.objects.pop(object_id, None)
                return httpx.Response(200)
            case ["data", "enterprise", "list", list_id]:
                items = self.lists.get(list_id, {})
                return httpx.Response(
                    200,
                    json=[{"uid": uid, "payload": payload} for uid, payload in items.items()],
                )
            case ["data", "enterprise", "list", list_id, "add", object_id]:
                self.lists.setdefault(list_id, {})[object_id] = form["payload"]
                return self._envelope(object_id, form["payload"])
            case ["data", "enterprise", "list", list_id, "update", object_id]:
                items = self.lists.get(list_id, {})
                if object_id not in items:
                    return httpx.Response(200, json={})
                items[object_id] = form["payload"]
                return self._envelope(object_id, form["payload"])
            case ["data", "enterprise", "list", list_id, "remove", object_id]:
                self.lists.get(list_id, {}).pop(object_id, None)
                return httpx.Response(200)

        return httpx.Response(404, text="no such route")

    @staticmethod
    def _envelope(object_id: str, payload: str | None) -> httpx.Response:
        if payload is None:
            return httpx.Response(200, json={})
        return httpx.Response(200, json={"uid": object_id, "payload": payload})

    def _push(self, form: dict[str, str]) -> httpx.Response:
        self._push_counter += 1
        body = {
            "identifier": f"push-{self._push_counter}",
            "creationDate": 1700000000000 + self._push_counter,
            "customIdentifier": form.get("customIdentifier"),
            "title": form["title"],
            "body": form["body"],
            "deliveryDate": int(form["deliveryDate"]),
            "priority": form["priority"],
            "expirationType": form["expirationType"],
            "expirationAmount": int(form["expirationAmount"]),
            "target": {
                "type": form["targetType"],
                "topic": form.get("targetTopic"),
                "deviceToken": form.get("targetDeviceToken"),
            },
            "invisible": form["invisible"] == "true",
        }
        return httpx.Response(200, content=json.dumps(body).encode("utf-8"))


@pytest.fixture
def fake_cloudlink() -> FakeCloudLink:
    """Fresh in-memory CloudLink for one test."""
    return FakeCloudLink()


@pytest.fixture
def client_config() -> CloudLinkClientConfig:
    """Client configuration pointing at the fake service."""
    return CloudLinkClientConfig(hostname="cloudlink.test", server_key=TEST_SERVER_KEY)


@pytest.fixture
def client(
    client_config: CloudLinkClientConfig,
    fake_cloudlink: FakeCloudLink,
) -> Generator[CloudLinkClient, None, None]:
    """
    CloudLinkClient wired to the in-memory service.

    Usage:
        def test_round_trip(client, fake_cloudlink):
            client.add_object("motd", "Hello")
            assert fake_cloudlink.request_count == 1
    """
    with CloudLinkClient(client_config, transport=fake_cloudlink.transport) as cloudlink_client:
        yield cloudlink_client
