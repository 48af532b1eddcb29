import json
import logging
from typing import Any

import requests

from ..config import Config, validate_config
from ..errors import ConfigurationError, RemoteWriteError

logger = logging.getLogger(__name__)

# Longest slice of a failed response body kept on RemoteWriteError.
_ERROR_BODY_LIMIT = 500


class BookStackClient:
    """Thin wrapper over the BookStack REST API page endpoints.

    Only ``200 OK`` counts as success; anything else raises
    ``RemoteWriteError`` carrying the status code.  No retries.
    """

    def __init__(self, config: Config):
        if not (config.server_url and config.token_id and config.token_secret):
            raise ConfigurationError(
                "BookStack URL, token id and token secret are all required"
            )
        validate_config(config)
        self.config = config
        self.api_url = self._get_api_url()
        self._session: requests.Session | None = None

    def __enter__(self) -> "BookStackClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = self._create_session()
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def _get_api_url(self) -> str:
        return f"{self.config.server_url.rstrip('/')}/api"

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(
            {
                "Authorization": f"Token {self.config.token_id}:{self.config.token_secret}",
                "Content-Type": "application/json; charset=utf-8",
            }
        )
        session.verify = not self.config.insecure
        return session

    def page_url(self, page_id: int | None = None) -> str:
        """Return the pages endpoint, or a single page's endpoint."""
        if page_id is None:
            return f"{self.api_url}/pages"
        return f"{self.api_url}/pages/{page_id}"

    def request(
        self, method: str, url: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Send a JSON request and return the decoded JSON response.

        Raises:
            RemoteWriteError: On transport failure, non-200 status, or a
                response body that is not a JSON object.
        """
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                data=json.dumps(payload).encode("utf-8"),
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise RemoteWriteError(
                f"Failed to reach BookStack at {url}: {exc}"
            ) from exc

        if response.status_code != 200:
            raise RemoteWriteError(
                f"Failed to update page: {method} {url} returned {response.status_code}",
                status=response.status_code,
                body=response.text[:_ERROR_BODY_LIMIT],
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteWriteError(
                "BookStack returned a non-JSON response",
                status=response.status_code,
                body=response.text[:_ERROR_BODY_LIMIT],
            ) from exc

        if not isinstance(data, dict):
            raise RemoteWriteError(
                "BookStack response is not a JSON object",
                status=response.status_code,
                body=response.text[:_ERROR_BODY_LIMIT],
            )

        logger.debug("Response: %s", data)
        return data

    def create_page(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Create a page (POST /api/pages). The server assigns the id.
        """
        return self.request("POST", self.page_url(), payload)

    def update_page(
        self, page_id: int, payload: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Replace an existing page (PUT /api/pages/{page_id}).
        """
        return self.request("PUT", self.page_url(page_id), payload)
