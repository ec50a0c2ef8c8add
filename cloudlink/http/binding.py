"""
CloudLink HTTP Binding.

Maps each SDK operation onto one request against the CloudLink REST API
(version 3) and decodes the response.

Request bodies are form-encoded. Responses are JSON and decode into
ObjectData envelopes, lists of envelopes, or push notifications.
Any non-2xx status becomes a CloudLinkClientError carrying the status
and body; transport failures propagate as httpx.HTTPError.

Routes (relative to <hostname>/3):
    POST /push/enterprise/notification
    GET  /data/enterprise/object/{objectId}
    POST /data/enterprise/object/{objectId}/add
    POST /data/enterprise/object/{objectId}/update
    POST /data/enterprise/object/{objectId}/remove
    GET  /data/enterprise/list/{listId}
    POST /data/enterprise/list/{listId}/add/{objectId}
    POST /data/enterprise/list/{listId}/update/{objectId}
    POST /data/enterprise/list/{listId}/remove/{objectId}
"""

import time
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter

from cloudlink.core.config import CloudLinkClientConfig
from cloudlink.core.exceptions import CloudLinkClientError
from cloudlink.core.logging import (
    HttpLogLevel,
    get_logger,
    http_log_level_for,
    log_with_source,
)
from cloudlink.http.auth import CloudLinkAuth
from cloudlink.schemas.object_data import ObjectData
from cloudlink.schemas.push_notification import PushNotification

logger = get_logger(__name__)

_OBJECT_DATA_LIST = TypeAdapter(list[ObjectData])

_REDACTED_HEADERS = frozenset({"authorization"})


def _segment(value: str) -> str:
    """Percent-encode one path segment."""
    return quote(value, safe="")


def _object_path(object_id: str, action: str | None = None) -> str:
    path = f"/data/enterprise/object/{_segment(object_id)}"
    return f"{path}/{action}" if action else path


def _list_path(list_id: str, action: str | None = None, object_id: str | None = None) -> str:
    path = f"/data/enterprise/list/{_segment(list_id)}"
    if action:
        path = f"{path}/{action}/{_segment(object_id)}"
    return path


def _loggable_headers(headers: httpx.Headers) -> dict[str, str]:
    return {
        key: ("<redacted>" if key.lower() in _REDACTED_HEADERS else value)
        for key, value in headers.items()
    }


class CloudLinkBinding:
    """
    Thin HTTP layer in front of the CloudLink REST API.

    Owns one httpx.Client for its lifetime; the client is created eagerly
    so concurrent callers share the same connection pool.

    Usage:
        binding = CloudLinkBinding(config)
        envelope = binding.get_object("settings")
        binding.close()
    """

    def __init__(
        self,
        config: CloudLinkClientConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the binding.

        Args:
            config: Client configuration
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.base_url = config.base_url
        self.http_log_level = http_log_level_for(config.log_level)
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=config.timeout,
            auth=CloudLinkAuth(config.server_key),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if not self._client.is_closed:
            self._client.close()

    def _log_request(self, request: httpx.Request) -> None:
        if self.http_log_level is HttpLogLevel.NONE:
            return
        fields: dict[str, Any] = {"method": request.method, "url": str(request.url)}
        if self.http_log_level >= HttpLogLevel.HEADERS:
            fields["headers"] = _loggable_headers(request.headers)
        if self.http_log_level >= HttpLogLevel.FULL:
            fields["body"] = request.content.decode("utf-8", errors="replace")
        log_with_source(logger, "sdk", "info", "CloudLink request", **fields)

    def _log_response(self, response: httpx.Response, elapsed_ms: float) -> None:
        if self.http_log_level is HttpLogLevel.NONE:
            return
        fields: dict[str, Any] = {
            "method": response.request.method,
            "url": str(response.request.url),
            "status_code": response.status_code,
            "elapsed_ms": round(elapsed_ms, 1),
        }
        if self.http_log_level >= HttpLogLevel.HEADERS:
            fields["headers"] = dict(response.headers)
        if self.http_log_level >= HttpLogLevel.FULL:
            fields["body"] = response.text
        log_with_source(logger, "sdk", "info", "CloudLink response", **fields)

    def _decode_error(self, response: httpx.Response) -> CloudLinkClientError:
        log_with_source(
            logger,
            "sdk",
            "warning",
            "CloudLink request rejected",
            method=response.request.method,
            url=str(response.request.url),
            status_code=response.status_code,
        )
        return CloudLinkClientError(
            status_code=response.status_code,
            body=response.text,
            reason=response.reason_phrase,
        )

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send one request and return the successful response.

        Args:
            method: HTTP method (GET, POST)
            path: API path relative to <hostname>/3
            **kwargs: Additional arguments for httpx

        Returns:
            httpx.Response with a 2xx status

        Raises:
            CloudLinkClientError: On a non-2xx status
            httpx.HTTPError: On transport failure
        """
        request = self._client.build_request(method, path, **kwargs)
        self._log_request(request)

        started = time.perf_counter()
        try:
            response = self._client.send(request)
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                "sdk",
                "error",
                "CloudLink request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise

        self._log_response(response, (time.perf_counter() - started) * 1000)

        if not response.is_success:
            raise self._decode_error(response)
        return response

    def _object_data(self, response: httpx.Response) -> ObjectData:
        if not response.content.strip():
            return ObjectData()
        return ObjectData.model_validate(response.json() or {})

    def send_push_notification(self, notification: PushNotification) -> PushNotification:
        response = self.request(
            "POST",
            "/push/enterprise/notification",
            data=notification.to_form(),
        )
        return PushNotification.model_validate_json(response.content)

    def get_object(self, object_id: str) -> ObjectData:
        return self._object_data(self.request("GET", _object_path(object_id)))

    def add_object(self, object_id: str, payload: str) -> ObjectData:
        response = self.request("POST", _object_path(object_id, "add"), data={"payload": payload})
        return self._object_data(response)

    def update_object(self, object_id: str, payload: str) -> ObjectData:
        response = self.request("POST", _object_path(object_id, "update"), data={"payload": payload})
        return self._object_data(response)

    def remove_object(self, object_id: str) -> None:
        self.request("POST", _object_path(object_id, "remove"))

    def get_list(self, list_id: str) -> list[ObjectData]:
        response = self.request("GET", _list_path(list_id))
        if not response.content.strip():
            return []
        return _OBJECT_DATA_LIST.validate_python(response.json() or [])

    def add_to_list(self, list_id: str, object_id: str, payload: str) -> ObjectData:
        response = self.request(
            "POST", _list_path(list_id, "add", object_id), data={"payload": payload}
        )
        return self._object_data(response)

    def update_in_list(self, list_id: str, object_id: str, payload: str) -> ObjectData:
        response = self.request(
            "POST", _list_path(list_id, "update", object_id), data={"payload": payload}
        )
        return self._object_data(response)

    def remove_from_list(self, list_id: str, object_id: str) -> None:
        self.request("POST", _list_path(list_id, "remove", object_id))
