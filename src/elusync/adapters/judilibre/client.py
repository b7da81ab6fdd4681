"""OAuth 2.0 client-credentials authentication against PISTE."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Final

import httpx

from elusync.adapters.feeds import FeedError

from .schema import TokenResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from elusync.config import JudilibreConfig

# renew a minute before the announced expiry
TOKEN_REFRESH_MARGIN: Final = 60.0


class JudilibreAuthError(FeedError):
    """PISTE refused the credentials or answered with an unusable token."""


class ClientCredentialsAuth(httpx.Auth):
    """httpx auth flow that fetches a bearer token and reuses it until it expires.

    The token request goes out through the same client, so it is retried like
    any other call. A 401 on an API call drops the token and retries once.
    """

    requires_request_body = False
    requires_response_body = True

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        *,
        scope: str = "openid",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.token_url = token_url
        self._form = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
            "scope": scope,
        }
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0

    @classmethod
    def from_config(cls, config: JudilibreConfig) -> ClientCredentialsAuth:
        return cls(config.token_url, config.client_id, config.client_secret)

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self._token is None or self._clock() >= self._expires_at - TOKEN_REFRESH_MARGIN:
            self._store((yield self._token_request()))
        self._sign(request)
        response = yield request
        if response.status_code == 401:
            self._store((yield self._token_request()))
            self._sign(request)
            yield request

    def _token_request(self) -> httpx.Request:
        return httpx.Request("POST", self.token_url, data=self._form)

    def _sign(self, request: httpx.Request) -> None:
        request.headers["Authorization"] = f"Bearer {self._token}"

    def _store(self, response: httpx.Response) -> None:
        if not response.is_success:
            self._token = None
            raise JudilibreAuthError(
                f"judilibre: token request failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            token = TokenResponse.model_validate(response.json())
        except ValueError as exc:
            raise JudilibreAuthError("judilibre: token response is not usable") from exc
        self._token = token.access_token
        self._expires_at = self._clock() + token.expires_in
