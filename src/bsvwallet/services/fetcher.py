"""Authenticated HTTP access to the wallet service.

This module provides:
- AuthenticatedFetcher, which performs one logical call against the
  service, injects the bearer token, classifies the response and recovers
  from access-token expiry with a single refresh-and-retry.

Every logical call makes at most two attempts: the original one and,
after a successful token refresh, one retry. Mutating requests rely on
this to never duplicate a side effect.
"""

import asyncio
from typing import Any

import httpx
import structlog

from bsvwallet.constants.endpoints import JSON_CONTENT_TYPE, REFRESH_PATH
from bsvwallet.core.exceptions import (
    AuthExpiredError,
    BsvWalletError,
    HttpError,
    SchemaError,
    TransportError,
)
from bsvwallet.services.auth.token_store import TokenStore

log = structlog.get_logger(__name__)


class AuthenticatedFetcher:
    """HTTP client with bearer injection and single-flight token refresh.

    Provides:
    - Lazy client initialization (created on first request)
    - Bearer header injection from the token store
    - One refresh-and-retry on 401, shared by concurrent callers
    - Response classification into data, bytes or a raised error
    - Proper resource cleanup

    Attributes:
        base_url: Base URL for all requests.
        timeout: Default request timeout in seconds.
        headers: Default headers for all requests.

    Example:
        fetcher = AuthenticatedFetcher(
            base_url="https://wallet.example.com",
            token_store=TokenStore(MemoryStorage()),
        )
        balance = await fetcher.get("/api/v1/user/wallet/balance")
        await fetcher.close()
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize AuthenticatedFetcher.

        Args:
            base_url: Base URL for all requests.
            token_store: Store holding the access/refresh pair.
            timeout: Request timeout in seconds (default: 30).
            headers: Default headers for all requests.
            transport: Optional httpx transport (mock mode, tests).
        """
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self._token_store = token_store
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._refresh_lock = asyncio.Lock()
        self._refresh_task: asyncio.Task[str] | None = None

    @property
    def token_store(self) -> TokenStore:
        return self._token_store

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            )
            log.debug("httpx_client_created", base_url=self.base_url)
        return self._client

    async def close(self) -> None:
        """Close the httpx client and release resources."""
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.debug("httpx_client_closed", base_url=self.base_url)

    async def __aenter__(self) -> "AuthenticatedFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        headers: dict[str, str] | None = None,
        json: Any = None,
        content: str | bytes | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        authenticate: bool = True,
        timeout: float | None = None,
    ) -> Any:
        """Perform one logical call against the service.

        Args:
            method: HTTP method (GET, POST, ...).
            endpoint: Request path (appended to base_url).
            headers: Extra headers. An explicit Authorization header wins
                over the stored token and disables the refresh protocol.
            json: Structured body, sent as application/json.
            content: Pre-serialized body. A str body is sent as
                application/json unless a content type is given.
            data: Form fields (multipart when combined with files).
            files: Multipart files. The content type is left to httpx so
                it can compute the boundary.
            authenticate: Attach the bearer token and apply the refresh
                protocol (False for login and refresh themselves).
            timeout: Per-call timeout override in seconds.

        Returns:
            Parsed JSON for JSON responses, raw bytes otherwise, None for
            an empty body.

        Raises:
            TransportError: If the call never reached the server.
            AuthExpiredError: If a 401 survives the refresh protocol.
            HttpError: For any other non-2xx response.
            SchemaError: If a JSON response body cannot be parsed.
        """
        caller_authorized = headers is not None and "authorization" in httpx.Headers(headers)
        use_refresh = authenticate and not caller_authorized

        sent_access = self._token_store.load().access if authenticate else None
        send_kwargs: dict[str, Any] = {
            "headers": headers,
            "json": json,
            "content": content,
            "data": data,
            "files": files,
            "timeout": timeout,
        }

        response = await self._send(method, endpoint, sent_access, **send_kwargs)

        if response.status_code == 401 and use_refresh:
            if not self._token_store.load().refresh:
                self._expire_session(endpoint, reason="no_refresh_token")
                raise AuthExpiredError()

            new_access = await self._refresh_access_token(sent_access)

            log.info("request_retry_after_refresh", method=method, path=endpoint)
            response = await self._send(method, endpoint, new_access, **send_kwargs)

            if response.status_code == 401:
                self._expire_session(endpoint, reason="unauthorized_after_refresh")
                raise AuthExpiredError()

        return self._handle_response(response, method, endpoint)

    async def get(self, endpoint: str, **kwargs: Any) -> Any:
        """Make a GET request.

        Args:
            endpoint: Request path.
            **kwargs: Additional arguments passed to request().
        """
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs: Any) -> Any:
        """Make a POST request.

        Args:
            endpoint: Request path.
            **kwargs: Additional arguments passed to request().
        """
        return await self.request("POST", endpoint, **kwargs)

    async def _send(
        self,
        method: str,
        endpoint: str,
        access: str | None,
        *,
        headers: dict[str, str] | None,
        json: Any,
        content: str | bytes | None,
        data: dict[str, Any] | None,
        files: dict[str, Any] | None,
        timeout: float | None,
    ) -> httpx.Response:
        client = await self._get_client()
        request_headers = self._build_headers(access, headers, content, files)

        extra: dict[str, Any] = {}
        if timeout is not None:
            extra["timeout"] = timeout

        log.debug("request_attempt", method=method, path=endpoint)

        try:
            return await client.request(
                method,
                endpoint,
                headers=request_headers,
                json=json,
                content=content,
                data=data,
                files=files,
                **extra,
            )
        except httpx.TimeoutException as e:
            log.warning("request_timeout", method=method, path=endpoint, error=str(e))
            raise TransportError(f"Request to {endpoint} timed out", endpoint=endpoint) from e
        except httpx.RequestError as e:
            log.warning("request_connection_error", method=method, path=endpoint, error=str(e))
            raise TransportError(
                f"Could not reach the wallet service: {e}", endpoint=endpoint
            ) from e

    @staticmethod
    def _build_headers(
        access: str | None,
        headers: dict[str, str] | None,
        content: str | bytes | None,
        files: dict[str, Any] | None,
    ) -> httpx.Headers:
        built = httpx.Headers(headers or {})

        if access and "authorization" not in built:
            built["Authorization"] = f"Bearer {access}"

        if isinstance(content, str) and "content-type" not in built:
            built["Content-Type"] = JSON_CONTENT_TYPE

        # httpx must generate the multipart boundary itself
        if files is not None and "content-type" in built:
            del built["content-type"]

        return built

    async def _refresh_access_token(self, stale_access: str | None) -> str:
        """Get an access token to retry with after a 401.

        Single-flight: the first caller starts one refresh task under the
        lock and every concurrent 401 caller, the starter included, awaits
        that same task through ``asyncio.shield``, so cancelling one caller
        leaves the refresh running for the others. A caller whose access
        token was already rotated reuses the new token without refreshing.

        Args:
            stale_access: Access token the failed request was sent with.

        Returns:
            The access token to retry with.

        Raises:
            AuthExpiredError: If refresh is impossible or fails.
        """
        async with self._refresh_lock:
            if self._refresh_task is None:
                current = self._token_store.load()

                if current.access and current.access != stale_access:
                    log.debug("token_already_refreshed")
                    return current.access

                if not current.refresh:
                    # A refresh ahead of us failed and cleared the store
                    raise AuthExpiredError()

                self._refresh_task = asyncio.ensure_future(self._run_refresh(current.refresh))
                self._refresh_task.add_done_callback(self._on_refresh_done)
            task = self._refresh_task

        return await asyncio.shield(task)

    async def _run_refresh(self, refresh_token: str) -> str:
        log.info("token_refresh_started")
        try:
            payload = await self.request(
                "POST",
                REFRESH_PATH,
                json={"refresh": refresh_token},
                authenticate=False,
            )
        except BsvWalletError as e:
            log.warning("token_refresh_failed", error=str(e))
            self._expire_session(REFRESH_PATH, reason="refresh_failed")
            raise AuthExpiredError() from e

        access = payload.get("access") if isinstance(payload, dict) else None
        if not isinstance(access, str) or not access:
            log.warning("token_refresh_failed", error="no access token in response")
            self._expire_session(REFRESH_PATH, reason="refresh_response_invalid")
            raise AuthExpiredError()

        rotated = payload.get("refresh")
        self._token_store.save(
            access=access,
            refresh=rotated if isinstance(rotated, str) and rotated else None,
        )
        log.info("token_refresh_succeeded")
        return access

    def _on_refresh_done(self, task: asyncio.Task[str]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        # Every waiter may have been cancelled; mark the outcome retrieved
        if not task.cancelled():
            task.exception()

    def _expire_session(self, endpoint: str, reason: str) -> None:
        log.warning("session_expired", path=endpoint, reason=reason)
        self._token_store.clear()

    def _handle_response(self, response: httpx.Response, method: str, endpoint: str) -> Any:
        if not response.is_success:
            message = self._error_message(response)
            log.warning(
                "request_failed",
                method=method,
                path=endpoint,
                status_code=response.status_code,
                error=message,
            )
            raise HttpError(
                status_code=response.status_code,
                message=message,
                endpoint=endpoint,
            )

        if not response.content:
            return None

        content_type = response.headers.get("content-type", "")
        if JSON_CONTENT_TYPE in content_type.lower():
            try:
                return response.json()
            except ValueError as e:
                log.warning("response_json_malformed", method=method, path=endpoint)
                raise SchemaError(
                    f"Malformed JSON response from {endpoint}", endpoint=endpoint
                ) from e

        return response.content

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Extract the error message from a failed response.

        Checks ``detail`` first, then ``error``, and falls back to a
        generic message carrying the status code.
        """
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            for field in ("detail", "error"):
                value = payload.get(field)
                if value:
                    return value if isinstance(value, str) else str(value)

        return f"HTTP error! status: {response.status_code}"
