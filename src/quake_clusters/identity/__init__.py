"""Stable keys and slugs for recomputed clusters."""

from .slug import generate_slug
from .stable_key import generate_stable_key

__all__ = ["generate_slug", "generate_stable_key"]
