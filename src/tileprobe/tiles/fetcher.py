"""HTTP tile fetching: one coordinate in, one ``TileResult`` out.

Downloads a single tile from the templated URL, keeps the on-the-wire size,
undoes gzip transport compression when it was negotiated, and decodes the
payload into per-layer feature counts.
"""

import gzip
import logging
import zlib
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from tileprobe.contracts import assert_tile_result
from tileprobe.tiles.decoder import decode_layers
from tileprobe.tiles.errors import DecodeError, DecompressionError, TransportError
from tileprobe.tiles.models import TileCoordinate, TileResult

__all__ = ['TileFetcher', 'build_tile_url', 'build_session']

logger = logging.getLogger(__name__)


def build_tile_url(template: str, z: int, x: int, y: int) -> str:
    """Substitute every ``{z}``, ``{x}`` and ``{y}`` in ``template``.

    Values are plain decimal integers, no padding.

    Examples
    --------
    >>> build_tile_url("https://t.example.com/{z}/{x}/{y}.pbf", 8, 213, 107)
    'https://t.example.com/8/213/107.pbf'
    """
    return (
        template.replace("{z}", str(z))
        .replace("{x}", str(x))
        .replace("{y}", str(y))
    )


def build_session(pool_size: int = 10, user_agent: Optional[str] = None) -> requests.Session:
    """Session whose connection pool is large enough for the fan-out.

    With the default pool of 10, extra concurrent connections to the same host
    would be opened and thrown away after each request.
    """
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    if user_agent:
        session.headers["User-Agent"] = user_agent
    return session


class TileFetcher:
    """Fetches and decodes tiles of one zoom level from one URL template.

    Each call to ``fetch()`` is independent: one GET, no retries, and every
    failure raised as a ``FetchError`` subclass carrying the coordinate and URL.

    **Size semantics:** the reported ``byte_size`` is the length of the body
    as transmitted. When gzip was negotiated that is the compressed length;
    decompressed bytes are used only for decoding.

    **Compression:** with ``allow_compression`` the request advertises
    ``Accept-Encoding: gzip``; without it ``identity`` is sent explicitly
    (``requests`` advertises gzip by default) and a body is never
    decompressed, whatever the server declares.

    Example usage::

        fetcher = TileFetcher(
            url_template="https://tiles.example.com/{z}/{x}/{y}.pbf",
            zoom=8,
            allow_compression=True,
            session=build_session(pool_size=16),
        )
        result = fetcher.fetch(TileCoordinate(213, 107))
    """

    def __init__(self, url_template: str, zoom: int, allow_compression: bool = True,
                 session: Optional[requests.Session] = None, timeout: float = 30.0):
        """Initialize fetcher.

        Parameters
        ----------
        url_template : str
            Template containing ``{z}``, ``{x}`` and ``{y}``.
        zoom : int
            Target zoom substituted for ``{z}``.
        allow_compression : bool, optional
            Negotiate gzip transport compression (default True).
        session : requests.Session, optional
            Shared session for connection reuse. Injectable for testing.
        timeout : float, optional
            Connect/read timeout in seconds per request.
        """
        self.url_template = url_template
        self.zoom = zoom
        self.allow_compression = allow_compression
        self.session = session or build_session()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None) -> "TileFetcher":
        """Build a fetcher from an ``InternalConfig``."""
        return cls(
            url_template=config.probe.url_template,
            zoom=config.probe.target_zoom,
            allow_compression=config.probe.compression,
            session=session,
            timeout=config.http.timeout_sec,
        )

    def url_for(self, coordinate: TileCoordinate) -> str:
        return build_tile_url(self.url_template, self.zoom, coordinate.x, coordinate.y)

    def fetch(self, coordinate: TileCoordinate) -> TileResult:
        """Fetch, decompress and decode one tile.

        Raises
        ------
        TransportError
            Connection/timeout/read failure or non-2xx status.
        DecompressionError
            ``Content-Encoding: gzip`` with a body that is not gzip.
        DecodeError
            Body is not a valid vector tile.
        """
        url = self.url_for(coordinate)
        body, content_encoding = self._download(coordinate, url)
        wire_size = len(body)

        payload = body
        if self.allow_compression and "gzip" in content_encoding.lower():
            payload = self._gunzip(body, coordinate, url)

        try:
            layers = decode_layers(payload)
        except Exception as e:
            raise DecodeError(f"invalid vector tile payload: {e}", coordinate, url) from e

        result = TileResult.from_layers(coordinate, wire_size, layers)
        assert_tile_result(result)

        logger.debug(
            "Fetched %s: %d bytes on wire, %d bytes decoded, %d features in %d layers",
            coordinate, wire_size, len(payload), result.total_features, len(result.layers),
        )
        return result

    def _request_headers(self) -> dict:
        return {"Accept-Encoding": "gzip" if self.allow_compression else "identity"}

    def _download(self, coordinate: TileCoordinate, url: str) -> tuple:
        """GET ``url`` and return the raw body bytes and Content-Encoding header."""
        try:
            response = self.session.get(
                url,
                headers=self._request_headers(),
                timeout=self.timeout,
                stream=True,
            )
        except requests.RequestException as e:
            raise TransportError(f"request failed: {e}", coordinate, url) from e

        try:
            if not 200 <= response.status_code < 300:
                raise TransportError(
                    f"HTTP {response.status_code} {response.reason or ''}".rstrip(),
                    coordinate, url,
                )
            # decode_content=False keeps the body exactly as transmitted
            body = response.raw.read(decode_content=False)
        except (requests.RequestException, Urllib3HTTPError, OSError) as e:
            raise TransportError(f"failed reading body: {e}", coordinate, url) from e
        finally:
            response.close()

        return body or b"", response.headers.get("Content-Encoding", "")

    @staticmethod
    def _gunzip(body: bytes, coordinate: TileCoordinate, url: str) -> bytes:
        try:
            return gzip.decompress(body)
        except (OSError, EOFError, zlib.error) as e:
            raise DecompressionError(f"invalid gzip body: {e}", coordinate, url) from e
