# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""HTTP helpers for release listings, tag metadata and binary downloads."""

from pathlib import Path
from typing import Any, Optional

import requests

from alpinebox import __version__
from alpinebox.errors import NetworkError, ParseError
from alpinebox.utils.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = f"alpinebox/{__version__}"


class HttpClient:
    """Thin wrapper over a requests session with mandatory timeouts.

    Any transport failure, timeout, non-2xx status or empty body is
    raised as NetworkError.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        download_timeout: float = 300.0,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.download_timeout = download_timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

    def _get(self, url: str, timeout: float, **kwargs) -> requests.Response:
        logger.debug(f"GET {url}")
        try:
            resp = self.session.get(url, timeout=timeout, **kwargs)
            resp.raise_for_status()
        except requests.Timeout as e:
            raise NetworkError(f"Timed out fetching {url}") from e
        except requests.RequestException as e:
            raise NetworkError(f"Failed to fetch {url}: {e}") from e
        return resp

    def get_text(self, url: str) -> str:
        """Fetch a page body as text."""
        body = self._get(url, self.timeout).text
        if not body.strip():
            raise NetworkError(f"Empty response from {url}")
        return body

    def get_json(self, url: str) -> Any:
        """Fetch and decode a JSON document."""
        resp = self._get(url, self.timeout, headers={"Accept": "application/json"})
        try:
            return resp.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e

    def download(self, url: str, dest: Path) -> int:
        """Stream a URL to a file.

        Returns:
            Number of bytes written
        """
        resp = self._get(url, self.download_timeout, stream=True)
        written = 0
        try:
            with open(dest, "wb") as f:
                for chunk in resp.iter_content(chunk_size=64 * 1024):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
        except requests.RequestException as e:
            raise NetworkError(f"Download of {url} interrupted: {e}") from e
        finally:
            resp.close()
        if written == 0:
            raise NetworkError(f"Empty download from {url}")
        return written
