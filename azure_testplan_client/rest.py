"""Request building and execution against the Azure DevOps REST API."""

import json
from typing import Any, Optional, Union

import httpx
from loguru import logger

from .auth.manager import AuthManager
from .config import ClientConfig

JSON_CONTENT_TYPE = "application/json"
JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"


class AzureDevOpsClientError(Exception):
    """Error from Azure DevOps API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def escape_spaces(value: str) -> str:
    """Escape spaces for use inside a URL path segment."""
    return value.replace(" ", "%20")


class RestRequest:
    """A URL bound to the client configuration, awaiting per-call values.

    Configuration tokens (``{{organization}}`` and friends) are resolved when
    the request is created. Call tokens (``:planId`` and friends) are resolved
    with :meth:`set_placeholder`, which returns a new request.
    """

    def __init__(self, template: str, config: ClientConfig):
        url = template
        if not config.team:
            # Without a team segment the project's default team applies
            url = url.replace("/{{team}}", "")
        if url.startswith("https://"):
            url = f"{config.protocol}://" + url[len("https://"):]
        url = (
            url.replace("{{instance}}", config.instance)
            .replace("{{organization}}", escape_spaces(config.organization))
            .replace("{{project-name}}", escape_spaces(config.project_name))
            .replace("{{team}}", escape_spaces(config.team))
            .replace("{{api-version}}", config.api_version)
        )
        self.url = url

    @classmethod
    def _from_url(cls, url: str) -> "RestRequest":
        request = cls.__new__(cls)
        request.url = url
        return request

    def set_placeholder(self, name: str, value: Any) -> "RestRequest":
        """Replace every ``:name`` token with ``value``.

        Args:
            name: Placeholder name without the leading colon.
            value: Substituted verbatim, no escaping applied.

        Returns:
            A new request with the placeholder resolved.
        """
        return self._from_url(self.url.replace(f":{name}", str(value)))

    def __repr__(self) -> str:
        return f"RestRequest({self.url!r})"


class RestClient:
    """Synchronous HTTP executor for Azure DevOps REST calls.

    An instance is owned by a single caller; it is not meant to be shared
    across threads.
    """

    def __init__(
        self,
        config: ClientConfig,
        auth: Optional[AuthManager] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            config: Connection settings used to resolve every request.
            auth: AuthManager instance. Built from ``config`` if omitted.
            transport: Optional httpx transport, mainly for tests.
            timeout: Request timeout in seconds.
        """
        self.config = config
        self.auth = auth or AuthManager(config)
        self._transport = transport
        self._timeout = timeout
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> "RestClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(timeout=self._timeout, transport=self._transport)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()

    def request(self, template: str) -> RestRequest:
        """Build a request from a URL template using this client's configuration."""
        return RestRequest(template, self.config)

    def _request(
        self,
        method: str,
        request: RestRequest,
        payload: Any = None,
        content_type: str = JSON_CONTENT_TYPE,
    ) -> Any:
        """Make an authenticated request to Azure DevOps API.

        Args:
            method: HTTP method.
            request: Fully resolved request.
            payload: Body for POST/PATCH requests. A string is sent as
                already-serialized JSON.
            content_type: Content-Type header value.

        Returns:
            Parsed JSON response, or None when the body is empty.

        Raises:
            AzureDevOpsClientError: If the request fails.
        """
        client = self._get_client()
        headers = {
            **self.auth.get_headers(),
            "Content-Type": content_type,
            "Accept": JSON_CONTENT_TYPE,
        }

        content: Optional[Union[str, bytes]] = None
        if payload is not None:
            content = payload if isinstance(payload, str) else json.dumps(payload)

        logger.debug(f"{method} {request.url}")
        try:
            response = client.request(
                method=method,
                url=request.url,
                content=content,
                headers=headers,
            )
            logger.debug(f"{method} {request.url} -> {response.status_code}")
            response.raise_for_status()

            if response.status_code == 204 or not response.content:
                return None

            try:
                return response.json()
            except ValueError as e:
                # A bad PAT yields a 203 with an HTML sign-in page
                error_msg = f"Azure DevOps API error: {response.status_code} - invalid JSON body"
                logger.error(f"{method} {request.url} failed: {error_msg}")
                raise AzureDevOpsClientError(
                    error_msg, response.status_code, response.text
                ) from e

        except httpx.HTTPStatusError as e:
            body = e.response.text
            error_msg = f"Azure DevOps API error: {e.response.status_code}"
            try:
                error_body = e.response.json()
                if isinstance(error_body, dict) and "message" in error_body:
                    error_msg = f"{error_msg} - {error_body['message']}"
                else:
                    error_msg = f"{error_msg} - {body}"
            except ValueError:
                error_msg = f"{error_msg} - {body}"
            logger.error(f"{method} {request.url} failed: {error_msg}")
            raise AzureDevOpsClientError(error_msg, e.response.status_code, body) from e

        except httpx.RequestError as e:
            logger.error(f"{method} {request.url} failed: {e}")
            raise AzureDevOpsClientError(f"Request failed: {str(e)}") from e

    def get(self, request: RestRequest) -> Any:
        """Issue a GET request."""
        return self._request("GET", request)

    def post(self, request: RestRequest, payload: Any) -> Any:
        """Issue a POST request with a JSON body."""
        return self._request("POST", request, payload)

    def patch(self, request: RestRequest, document: Any) -> Any:
        """Issue a PATCH request with a JSON-Patch document.

        Args:
            request: Fully resolved request.
            document: List of ``{"op", "path", "value"}`` operations.
        """
        return self._request("PATCH", request, document, content_type=JSON_PATCH_CONTENT_TYPE)

    def patch_as_post(self, request: RestRequest, payload: Any) -> Any:
        """Issue a PATCH request carrying a plain JSON body.

        Some endpoints require the PATCH verb but reject JSON-Patch bodies.
        """
        return self._request("PATCH", request, payload)

    def delete(self, request: RestRequest) -> Any:
        """Issue a DELETE request."""
        return self._request("DELETE", request)
