"""
Base HTTP Client

Shared plumbing for the data provider clients: one requests.Session per
client, identification headers, per-call timeout, retry policy, status and
JSON handling.
"""

import logging
from typing import Any, Dict, Optional

import requests

from ..exceptions import SourceError, SourceHTTPError
from ..utils.retry import NO_RETRY, RetryPolicy

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; poolwatch/0.3; +https://github.com/poolwatch)"

DEFAULT_TIMEOUT_SEC = 30.0


class BaseSourceClient:
    """
    Stateless-per-call HTTP client for one upstream provider.

    Subclasses set `name` and implement their fetch methods on top of
    `_get_json`.
    """

    name = "source"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.retry_policy = retry_policy or NO_RETRY
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })

    def close(self):
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _request(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        response = self.session.get(url, params=params, timeout=self.timeout)
        if not 200 <= response.status_code < 300:
            raise SourceHTTPError(response.status_code, url)
        return response

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a JSON document.

        Returns:
            Decoded JSON, or None when the body is not valid JSON (logged).

        Raises:
            SourceHTTPError: non-2xx status (after retries for 5xx)
            SourceError: transport failure after retries
        """
        try:
            response = self.retry_policy.call(
                self._request, url, params, description=f"{self.name} GET"
            )
        except SourceError:
            raise
        except requests.exceptions.RequestException as e:
            raise SourceError(f"{self.name} request failed: {e}") from e

        try:
            return response.json()
        except ValueError:
            preview = (response.text or "")[:500]
            logger.error(f"{self.name}: response is not valid JSON")
            logger.debug(f"{self.name}: body preview: {preview}")
            return None
