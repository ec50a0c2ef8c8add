"""
CloudLink Authentication.

Every request to the CloudLink REST API carries the server key in the
Authorization header using the Gluon scheme.
"""

from collections.abc import Generator

import httpx

AUTH_SCHEME = "Gluon"


class CloudLinkAuth(httpx.Auth):
    """httpx auth flow adding 'Authorization: Gluon <server key>'."""

    def __init__(self, server_key: str) -> None:
        self._authorization = f"{AUTH_SCHEME} {server_key}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = self._authorization
        yield request
