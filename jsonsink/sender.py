"""HTTP client for forwarding report payloads to the sink."""

import logging
from collections.abc import Mapping
from typing import Optional

import httpx

from jsonsink.config import RequestMethod

JSON_CONTENT_TYPE = "application/json"


class SinkTransportError(Exception):
    """The request never produced an HTTP response."""

    def __init__(self, url: str, reason: Exception):
        self.url = url
        self.reason = reason
        super().__init__(f"Error sending to {url}: {reason}")


class SinkSender:
    """HTTP client for the sink. One request per send, no retries."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the sender.

        Args:
            timeout: HTTP timeout in seconds. None keeps the httpx default.
            logger: Logger to report to. Defaults to the module logger.
        """
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._client: Optional[httpx.Client] = None

    @property
    def client(self) -> httpx.Client:
        """Get HTTP client (lazy initialization)."""
        if self._client is None:
            if self.timeout is None:
                self._client = httpx.Client()
            else:
                self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def send(
        self,
        payload: bytes,
        *,
        url: str,
        method: RequestMethod = RequestMethod.PUT,
        headers: Optional[Mapping[str, str]] = None,
    ) -> int:
        """Send one payload to the sink.

        Any HTTP status counts as delivered; only the status code is logged.

        Args:
            payload: Serialized JSON body
            url: Sink URL
            method: PUT or POST
            headers: Extra static headers

        Returns:
            HTTP status code returned by the sink

        Raises:
            SinkTransportError: connection, DNS, TLS or timeout failure,
                or a sink URL httpx cannot parse
        """
        request_headers = dict(headers or {})
        for key in list(request_headers):
            if key.lower() == "content-type":
                del request_headers[key]
        request_headers["content-type"] = JSON_CONTENT_TYPE

        try:
            response = self.client.request(
                method.value,
                url,
                content=payload,
                headers=request_headers,
            )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            self.logger.error(f"Sink returned error: {e!r}")
            raise SinkTransportError(url, e) from e

        self.logger.info(f"Sink return status code: {response.status_code}")
        return response.status_code

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None
