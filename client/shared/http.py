"""
HTTP client factory for the Pulse API.

Wraps a single httpx.AsyncClient whose cookie jar carries the credentialed
session, the same way the browser sends cookies with `credentials: include`.
"""

import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .config import get_settings
from .exceptions import ApiError, ApiUnavailableError

logger = logging.getLogger(__name__)

# Keys the backend uses for human-readable error messages, in priority order
ERROR_MESSAGE_KEYS = ("error", "message", "detail", "msg")


def extract_error_message(response: httpx.Response, fallback: str) -> str:
    """
    Get the server-reported error message from a response body.

    Returns the fallback when the body is not JSON or carries no message.
    """
    try:
        body = response.json()
    except ValueError:
        return fallback

    if isinstance(body, dict):
        for key in ERROR_MESSAGE_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return fallback


def raise_for_api_error(response: httpx.Response, fallback: str) -> None:
    """Raise ApiError for any non-2xx response."""
    if response.is_success:
        return
    message = extract_error_message(response, fallback)
    logger.debug(f"API error {response.status_code}: {message}")
    raise ApiError(message, status_code=response.status_code)


def json_body(response: httpx.Response) -> Any:
    """Decode a JSON body, returning an empty dict for empty or invalid bodies."""
    try:
        return response.json()
    except ValueError:
        return {}


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_body(model: type[ModelT], data: Any, response: httpx.Response, what: str) -> ModelT:
    """
    Validate a decoded body against a model.

    Raises:
        ApiError: If the body does not match the model
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Malformed {what} response: {e.error_count()} validation error(s)")
        raise ApiError(f"Malformed {what} response", status_code=response.status_code) from e


class ApiClient:
    """
    Async client for the Pulse backend.

    Transport failures, timeouts and unreadable responses are raised as
    ApiUnavailableError.
    HTTP error statuses are returned to the caller, who decides what a
    non-2xx response means for its operation.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: API base URL. Defaults to the API_URL setting.
            timeout: Default per-request timeout in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.default_timeout = timeout if timeout is not None else settings.request_timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=self.default_timeout,
            headers={"Accept": "application/json"},
        )

    @property
    def cookies(self) -> httpx.Cookies:
        """The session cookie jar."""
        return self._client.cookies

    def build_url(self, path: str, params: Optional[dict[str, Any]] = None) -> str:
        """Build an absolute URL for redirect-based flows."""
        return str(httpx.URL(f"{self.base_url}{path}", params=params))

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send a request and return the response, whatever its status."""
        try:
            return await self._client.request(
                method,
                path,
                json=json,
                params=params,
                data=data,
                files=files,
                timeout=timeout if timeout is not None else self.default_timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out")
            raise ApiUnavailableError("The server took too long to respond") from e
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiUnavailableError() from e
        except httpx.RequestError as e:
            # Undecodable bodies and redirect loops
            logger.warning(f"{method} {path} returned an unusable response: {e}")
            raise ApiUnavailableError("The server sent an unreadable response") from e

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


# Module-level client cache
_api_client: Optional[ApiClient] = None


def get_api_client() -> ApiClient:
    """
    Get the shared API client.

    Every service built from it shares one cookie jar, so a login made
    through the auth service is visible to the events service.
    """
    global _api_client

    if _api_client is None:
        _api_client = ApiClient()

    return _api_client


def reset_api_client() -> None:
    """
    Reset the cached API client.

    Useful for testing or when configuration changes.
    """
    global _api_client
    _api_client = None
