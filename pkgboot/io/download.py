"""
HTTP(S) transport for pkgboot.

This module is the only place pkgboot talks to the network. Strategies ask it
for a registry's version list (``fetch_text`` / ``fetch_json``) and for
package files (``fetch_to_file``); everything else about HTTP stays here.

Key Features:

- **Retry Logic with Exponential Backoff** - Transient failures (429, 500, 502, 503, 504) are retried by urllib3.util.Retry before an error surfaces.
- **Per-request Network Settings** - Proxy, extra headers and User-Agent are applied right before every request, so one transport serves several registries.
- **Atomic Writes** - Files download to ``<name>.part`` and are renamed on success; a failed download leaves no partial file behind.
- **Streaming SHA-256** - The digest is computed while writing, no second read.

Exception Classes:

The transport raises ``requests`` exceptions (``requests.HTTPError``,
``requests.ConnectionError``, ...). Strategies translate them into
pkgboot errors that carry the failing source's name.

Example:
    Fetch a version list and a package:

    >>> from pathlib import Path
    >>> from pkgboot.io import HttpTransport, NetworkSettings
    >>> transport = HttpTransport(NetworkSettings(timeout=30))
    >>> body = transport.fetch_text(
    ...     "https://www.nuget.org/api/v2/package-versions/Paket"
    ... )
    >>> sha256 = transport.fetch_to_file(
    ...     "https://www.nuget.org/api/v2/package/Paket",
    ...     Path("staging/paket.latest.nupkg"),
    ... )

Design Decisions:
- **Why a prepare hook?** Proxies are chosen per URL (explicit proxy first,
  then the environment's proxy for that host), mirroring how a web client
  is prepared before each call.
- **Why no timeouts in strategies?** Cancellation and timeouts belong to the
  transport; strategies only see success or an exception.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import hashlib
from pathlib import Path
import time
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from pkgboot.logging import get_global_logger

# Stream size per chunk (1 MiB).
DEFAULT_CHUNK = 1024 * 1024
DEFAULT_USER_AGENT = "pkgboot/0.1"


@dataclass(frozen=True)
class NetworkSettings:
    """Caller-supplied network configuration.

    Attributes:
        proxy: Proxy URL used for both http and https (None: use the
            environment's proxy for each URL).
        headers: Extra headers sent with every request.
        timeout: Per-request timeout in seconds.
        user_agent: User-Agent header value.
        retries: Total retry budget for transient failures.
    """

    proxy: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: int = 60
    user_agent: str = DEFAULT_USER_AGENT
    retries: int = 5

    @classmethod
    def from_config(cls, network: Mapping[str, Any] | None) -> NetworkSettings:
        """Build settings from the ``network`` section of the configuration."""
        network = network or {}
        return cls(
            proxy=network.get("proxy") or None,
            headers=dict(network.get("headers") or {}),
            timeout=int(network.get("timeout", 60)),
            user_agent=network.get("user_agent") or DEFAULT_USER_AGENT,
            retries=int(network.get("retries", 5)),
        )


def make_session(settings: NetworkSettings) -> requests.Session:
    """Create a requests.Session with retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets the configured User-Agent and extra headers.
    """
    s = requests.Session()
    retries = Retry(
        total=settings.retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": settings.user_agent})
    s.headers.update(dict(settings.headers))
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def prepare_session(
    session: requests.Session, url: str, settings: NetworkSettings
) -> None:
    """Apply proxy configuration for ``url`` to ``session``.

    An explicit proxy wins. Otherwise the proxy the environment defines for
    that URL (HTTP_PROXY / HTTPS_PROXY honouring NO_PROXY) is used.
    """
    if settings.proxy:
        session.proxies = {"http": settings.proxy, "https": settings.proxy}
    else:
        session.proxies = requests.utils.get_environ_proxies(url)


PrepareHook = Callable[[requests.Session, str], None]


class HttpTransport:
    """Blocking HTTP transport used by all remote strategies.

    Args:
        settings: Network configuration applied to every request.
        prepare: Optional extra hook called with (session, url) right before
            each request, after proxies are set.
    """

    def __init__(
        self,
        settings: NetworkSettings | None = None,
        prepare: PrepareHook | None = None,
    ) -> None:
        self.settings = settings or NetworkSettings()
        self._prepare = prepare

    def _get(
        self,
        session: requests.Session,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        stream: bool = False,
    ) -> requests.Response:
        logger = get_global_logger()
        prepare_session(session, url, self.settings)
        if self._prepare is not None:
            self._prepare(session, url)

        logger.verbose("HTTP", f"GET {url}")
        resp = session.get(
            url,
            headers=dict(headers or {}),
            stream=stream,
            allow_redirects=True,
            timeout=self.settings.timeout,
        )
        for hist in resp.history:
            logger.debug(
                "HTTP",
                f"Redirect {hist.status_code} -> {hist.headers.get('Location', 'unknown')}",
            )
        try:
            resp.raise_for_status()
        except requests.HTTPError as err:
            resp.close()
            raise requests.HTTPError(
                f"request failed for {url}: {err}", response=resp
            ) from err
        logger.debug("HTTP", f"Response: {resp.status_code} {resp.reason}")
        return resp

    def fetch_text(self, url: str, headers: Mapping[str, str] | None = None) -> str:
        """GET ``url`` and return the body as text."""
        with make_session(self.settings) as session:
            return self._get(session, url, headers=headers).text

    def fetch_json(self, url: str, headers: Mapping[str, str] | None = None) -> Any:
        """GET ``url`` and return the decoded JSON body."""
        with make_session(self.settings) as session:
            return self._get(session, url, headers=headers).json()

    def fetch_to_file(
        self,
        url: str,
        destination: Path,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        """Download ``url`` to ``destination`` and return its SHA-256.

        Writes to ``<destination>.part`` then renames it on success, so the
        destination never holds a partial file.

        Args:
            url: Source URL (redirects are followed).
            destination: Target file path; parent folders are created.
            headers: Extra headers for this request only.

        Returns:
            Hex SHA-256 digest of the downloaded content.

        Raises:
            requests.HTTPError: For non-2xx responses (after retries).
            requests.RequestException: For connection failures and timeouts.
        """
        logger = get_global_logger()
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        tmp = destination.with_suffix(destination.suffix + ".part")

        with make_session(self.settings) as session:
            resp = self._get(session, url, headers=headers, stream=True)
            sha = hashlib.sha256()
            downloaded = 0
            started_at = time.time()
            try:
                with tmp.open("wb") as f:
                    for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
                        if not chunk:
                            continue
                        f.write(chunk)
                        sha.update(chunk)
                        downloaded += len(chunk)
            except (OSError, requests.RequestException):
                tmp.unlink(missing_ok=True)
                raise
            finally:
                resp.close()

        tmp.replace(destination)
        digest = sha.hexdigest()
        elapsed = time.time() - started_at
        logger.verbose(
            "FILE", f"Downloaded {downloaded} bytes to {destination} in {elapsed:.1f}s"
        )
        logger.debug("FILE", f"SHA-256: {digest}")
        return digest
