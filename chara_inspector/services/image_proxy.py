"""
Image Proxy Service
===================

Fetches remote images on behalf of clients that cannot (CORS, hotlink rules),
so the raw bytes can be handed to the character card reader.

Only http/https URLs are fetched, responses must declare an ``image/*`` content
type, and bodies above the configured size are refused. Successful fetches are
cached in memory for a short time.
"""

import logging
import re
import time
from typing import Dict, Optional, Tuple
from urllib.parse import unquote, urlparse

import httpx
from pydantic import BaseModel

from chara_inspector.config import ProxyConfig

logger = logging.getLogger(__name__)

DISCORD_HOSTS = ("discordapp.net", "discord.com")
DEFAULT_FILENAME = "character.png"


class ImageProxyError(Exception):
    """Raised when a remote image cannot be fetched or is not acceptable."""

    def __init__(self, message: str, status_code: int = 502, url: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class FetchedImage(BaseModel):
    """Raw image bytes returned by the proxy."""
    url: str
    source_url: str
    content: bytes
    content_type: str
    from_cache: bool = False

    @property
    def size(self) -> int:
        return len(self.content)


def clean_discord_url(url: str) -> str:
    """
    Strip Discord CDN parameters that make it serve re-encoded WebP.

    Everything from ``&format=webp`` onward is dropped, along with any
    ``&quality=``, ``&width=`` and ``&height=`` parameters. Other URLs are
    returned unchanged.
    """
    if not any(host in url for host in DISCORD_HOSTS):
        return url

    cleaned = url
    format_index = cleaned.find("&format=webp")
    if format_index != -1:
        cleaned = cleaned[:format_index]

    cleaned = re.sub(r"&quality=\d+", "", cleaned)
    cleaned = re.sub(r"&width=\d+", "", cleaned)
    cleaned = re.sub(r"&height=\d+", "", cleaned)

    if cleaned != url:
        logger.debug(f"Cleaned Discord URL: {url} -> {cleaned}")
    return cleaned


def filename_from_url(url: str) -> str:
    """Last path segment of a URL, or 'character.png' when there is none."""
    try:
        path = urlparse(url).path
    except ValueError:
        return DEFAULT_FILENAME
    name = unquote(path.rsplit("/", 1)[-1])
    return name or DEFAULT_FILENAME


class ImageProxyService:
    """Fetch remote images with scheme, type and size checks."""

    def __init__(
        self,
        config: Optional[ProxyConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize proxy service.

        Args:
            config: Proxy settings (defaults if omitted)
            transport: Optional httpx transport, used to fake the network in tests
        """
        self.config = config or ProxyConfig()
        self.client = httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )
        self._cache: Dict[str, Tuple[float, FetchedImage]] = {}
        self._cache_bytes = 0

    def validate_url(self, url: str) -> str:
        """
        Check that a URL is absolute and uses an allowed scheme.

        Raises:
            ImageProxyError: 400 if the URL is malformed or the scheme is not allowed
        """
        url = (url or "").strip()
        if not url:
            raise ImageProxyError("Missing url parameter", status_code=400)

        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise ImageProxyError(f"Invalid URL: {e}", status_code=400, url=url) from e

        if parsed.scheme.lower() not in self.config.allowed_schemes:
            raise ImageProxyError(
                f"Unsupported protocol: {parsed.scheme or '(none)'}",
                status_code=400,
                url=url,
            )
        if not parsed.netloc:
            raise ImageProxyError("Invalid URL: missing host", status_code=400, url=url)
        return url

    async def fetch(self, url: str) -> FetchedImage:
        """
        Fetch an image, serving from cache when a fresh copy exists.

        Args:
            url: Absolute http(s) image URL

        Returns:
            FetchedImage with the raw body

        Raises:
            ImageProxyError: With an HTTP status describing the failure
        """
        url = self.validate_url(url)

        cached = self._get_cached(url)
        if cached is not None:
            logger.debug(f"Serving image from cache: {url}")
            return cached

        source_url = clean_discord_url(url)
        logger.info(f"Proxying image request: {source_url}")

        headers = {
            "User-Agent": self.config.user_agent,
            "Accept": self.config.accept,
            "Cache-Control": "no-cache",
        }
        max_bytes = self.config.max_image_bytes

        try:
            async with self.client.stream("GET", source_url, headers=headers) as response:
                if not response.is_success:
                    raise ImageProxyError(
                        f"HTTP {response.status_code}: {response.reason_phrase}",
                        status_code=502,
                        url=url,
                    )

                content_type = response.headers.get("content-type", "")
                if not content_type.startswith("image/"):
                    raise ImageProxyError(
                        f"Response is not an image (content-type: {content_type or 'missing'})",
                        status_code=415,
                        url=url,
                    )

                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > max_bytes:
                    raise ImageProxyError(
                        f"Image too large: {declared} bytes (limit {max_bytes})",
                        status_code=413,
                        url=url,
                    )

                body = bytearray()
                async for part in response.aiter_bytes():
                    body.extend(part)
                    if len(body) > max_bytes:
                        raise ImageProxyError(
                            f"Image too large: more than {max_bytes} bytes",
                            status_code=413,
                            url=url,
                        )
        except httpx.TimeoutException as e:
            raise ImageProxyError(f"Timed out fetching image: {e}", status_code=504, url=url) from e
        except httpx.HTTPError as e:
            raise ImageProxyError(f"Failed to fetch image: {e}", status_code=502, url=url) from e

        image = FetchedImage(
            url=url,
            source_url=source_url,
            content=bytes(body),
            content_type=content_type,
        )
        self._store(url, image)
        logger.info(f"Fetched image {url} ({image.size} bytes, {content_type})")
        return image

    def _get_cached(self, url: str) -> Optional[FetchedImage]:
        entry = self._cache.get(url)
        if entry is None:
            return None
        expires_at, image = entry
        if time.monotonic() >= expires_at:
            self._evict(url)
            return None
        return image.model_copy(update={"from_cache": True})

    def _store(self, url: str, image: FetchedImage) -> None:
        if self.config.cache_ttl_seconds <= 0 or self.config.cache_max_entries <= 0:
            return
        self._evict(url)
        if image.size > self.config.cache_max_bytes:
            logger.debug(f"Not caching {url}: {image.size} bytes exceeds cache limit")
            return
        while self._cache and (
            len(self._cache) >= self.config.cache_max_entries
            or self._cache_bytes + image.size > self.config.cache_max_bytes
        ):
            # Oldest insertion first
            self._evict(next(iter(self._cache)))
        self._cache[url] = (time.monotonic() + self.config.cache_ttl_seconds, image)
        self._cache_bytes += image.size

    def _evict(self, url: str) -> None:
        entry = self._cache.pop(url, None)
        if entry is not None:
            self._cache_bytes -= entry[1].size

    def clear_cache(self) -> None:
        self._cache.clear()
        self._cache_bytes = 0

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
