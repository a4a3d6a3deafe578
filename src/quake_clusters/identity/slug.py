"""Human-readable, URL-safe slugs for new cluster definitions.

A slug is generated exactly once, when a stable key is first seen, and
is never regenerated.  It embeds a short identifier derived from the
stable key so that slugs of different clusters do not collide in
practice.
"""

from __future__ import annotations

import math
import re

from quake_clusters.clustering.summary import format_fixed

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")
_GEO_DISALLOWED = re.compile(r"[^a-z0-9-]")

LOCATION_SLUG_MAX_LEN = 30
GEO_IDENTIFIER_MAX_LEN = 15
HASH_PREFIX = "skh"
HASH_IDENTIFIER_LEN = 6

# 32-bit FNV-1a parameters (http://www.isthe.com/chongo/tech/comp/fnv/)
FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a hash of the UTF-8 encoding of ``text``."""
    h = FNV32_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * FNV32_PRIME) & 0xFFFFFFFF
    return h


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def slugify_location(location_name: str | None) -> str:
    """Lowercase, hyphenated location text trimmed to 30 characters."""
    text = _DISALLOWED.sub("", (location_name or "unknown-location").lower()).strip()
    text = _HYPHEN_RUN.sub("-", _WHITESPACE.sub("-", text))
    text = text[:LOCATION_SLUG_MAX_LEN].strip("-")
    return text or "unknown-location"


def stable_key_identifier(stable_key: str) -> str:
    """Short identifier derived from a stable key.

    Keys of the expected ``version_location_time_geo`` shape yield
    ``"{time}-{geo}"`` with the decimal points spelled as ``d``
    (``"81234-35d7--117d6"``).  Anything else falls back to ``"skh"``
    plus the first six base-36 digits of the key's FNV-1a hash.
    """
    parts = stable_key.split("_")
    if len(parts) == 4:
        time_part = parts[2]
        geo_part = _GEO_DISALLOWED.sub("", parts[3].replace(".", "d"))[:GEO_IDENTIFIER_MAX_LEN]
        return f"{time_part}-{geo_part}"
    digest = to_base36(fnv1a_32(stable_key))
    return f"{HASH_PREFIX}{digest[:HASH_IDENTIFIER_LEN]}"


def generate_slug(
    member_count: int,
    location_name: str | None,
    max_magnitude: float | None,
    stable_key: str,
) -> str:
    """Build ``"{count}-quakes-near-{location}-m{magnitude}-{key id}"``."""
    count = str(member_count) if isinstance(member_count, int) else "multiple"
    if isinstance(max_magnitude, (int, float)) and math.isfinite(max_magnitude):
        magnitude = format_fixed(max_magnitude)
    else:
        magnitude = "unknown"
    location = slugify_location(location_name)
    return f"{count}-quakes-near-{location}-m{magnitude}-{stable_key_identifier(stable_key)}"
