"""Remote HTTP entropy sources.

Fetching is Result-style: ``fetch_entropy`` always returns a FetchOutcome
describing how the response was interpreted (or why it failed), and
``raw_from_http`` folds those outcomes into seed material. Network errors
and timeouts never propagate; they degrade to whatever material was
already collected and stay visible through the outcome list.

Response interpretation, in order of preference:
1. exactly 64 hex characters -> the 32 decoded bytes (used directly)
2. a base-10 int64 -> its 8 little-endian bytes (used directly)
3. other non-empty text -> SHA256 of the trimmed text (hashed in)
4. empty body -> URL, status line, headers and first 512 body bytes (hashed in)

Example:
    >>> import httpx
    >>> with httpx.Client(timeout=3.0) as client:
    ...     material, outcomes = raw_from_http(["https://example.org/seed"], client=client)
"""

from contextlib import nullcontext
import hashlib
import logging
import re
from typing import List, Optional, Sequence, Tuple

import httpx

from rng_chaos.domain import FetchOutcome
from rng_chaos.utils import int64_to_le

__all__ = ["DEFAULT_TIMEOUT_S", "fetch_entropy", "raw_from_http", "open_client"]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 3.0

_DECIMAL = re.compile(rb"^[+-]?[0-9]+$")
_HEADER_BODY_BYTES = 512


def open_client(timeout_s: float = DEFAULT_TIMEOUT_S) -> httpx.Client:
    """Create an HTTP client with a bounded timeout for entropy fetches."""
    return httpx.Client(timeout=timeout_s, follow_redirects=True)


def fetch_entropy(url: str, client: httpx.Client) -> FetchOutcome:
    """Fetch one endpoint and classify its response.

    Args:
        url: Endpoint to GET
        client: HTTP client (its timeout bounds the request)

    Returns:
        FetchOutcome; ``kind == "error"`` on any transport failure or
        unparseable URL
    """
    try:
        response = client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Entropy fetch failed for {url}: {e}")
        return FetchOutcome(url=url, kind="error", error=str(e) or type(e).__name__)

    body = response.content
    text = body.strip()

    if len(text) == 64:
        try:
            return FetchOutcome(url=url, kind="hex", material=bytes.fromhex(text.decode("ascii")))
        except (UnicodeDecodeError, ValueError):
            pass

    if text:
        if _DECIMAL.match(text):
            value = int(text)
            if -(1 << 63) <= value < (1 << 63):
                return FetchOutcome(url=url, kind="int", material=int64_to_le(value))
        return FetchOutcome(url=url, kind="text", material=hashlib.sha256(text).digest())

    blob = bytearray()
    blob += url.encode("utf-8")
    blob += f"{response.status_code} {response.reason_phrase}".encode("utf-8")
    for name, value in response.headers.raw:
        blob += name
        blob += value
    blob += body[:_HEADER_BODY_BYTES].ljust(_HEADER_BODY_BYTES, b"\x00")
    logger.debug(f"Entropy endpoint {url} returned an empty body, using headers")
    return FetchOutcome(url=url, kind="headers", material=bytes(blob))


def raw_from_http(
    urls: Sequence[str],
    client: Optional[httpx.Client] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> Tuple[bytes, List[FetchOutcome]]:
    """Collect seed material from remote endpoints.

    URLs are consulted in order; blank entries are skipped. The first
    directly decodable response (hex or integer) is returned as-is. Otherwise
    text and header material is folded through a running SHA256 and its
    32-byte digest is returned.

    Args:
        urls: Endpoints in priority order
        client: Optional shared client (left open); one is created otherwise
        timeout_s: Per-request timeout for a newly created client

    Returns:
        (material, outcomes) where outcomes lists every attempted fetch
    """
    hasher = hashlib.sha256()
    outcomes: List[FetchOutcome] = []

    with nullcontext(client) if client is not None else open_client(timeout_s) as http:
        for url in urls:
            if not url.strip():
                continue

            outcome = fetch_entropy(url, http)
            outcomes.append(outcome)

            if outcome.direct:
                return outcome.material, outcomes
            if not outcome.failed:
                hasher.update(outcome.material)

    return hasher.digest(), outcomes
