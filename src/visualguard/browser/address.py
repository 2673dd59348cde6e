"""Target address normalization."""

from __future__ import annotations

import re

DEFAULT_SCHEME = "https"

# Only web transports are navigated; anything else is treated as a bare host.
_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_address(raw: str) -> str:
    """Return *raw* as an absolute web URL, assuming ``https://`` when no scheme is given.

    Addresses that already start with ``http://`` or ``https://`` are returned
    unchanged (apart from surrounding whitespace), so normalizing twice is a
    no-op. Any other prefix, ``file://`` included, gets ``https://`` in front
    and never reaches the browser as a local resource.

    Raises:
        ValueError: If *raw* is empty or blank.
    """
    address = (raw or "").strip()
    if not address:
        raise ValueError("Missing URL parameter")
    if _SCHEME_RE.match(address):
        return address
    return f"{DEFAULT_SCHEME}://{address.lstrip('/')}"
