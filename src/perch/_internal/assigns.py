"""Assigns coercion — accept mappings, pair iterables, or nothing.

Every public render entry point copies its assigns through
``coerce_assigns()`` so callers never see their mapping mutated.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from perch._internal.types import Assigns

# Reserved assign keys
LAYOUT_KEY = "layout"
INNER_CONTENT_KEY = "inner_content"
RESOURCE_AS_KEY = "as"


def coerce_assigns(assigns: Mapping[str, Any] | Iterable[tuple[str, Any]] | None) -> Assigns:
    """Return a fresh dict built from *assigns*."""
    if assigns is None:
        return {}
    return dict(assigns)
