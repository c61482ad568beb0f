"""Runtime rendering API.

Renders templates owned by views, composes layouts, renders collections,
and encodes final output per format::

    render(UserView, "index.html", {"name": "Ada"})
    render(UserView, "index.html", {"layout": (LayoutView, "app.html")})
    render_many(users, UserView, "show.json")
    render_to_string(UserView, "show.json", {"user": user})

``render()`` returns the inner representation a template produces
(``Markup`` for HTML, plain data for JSON). ``render_to_iodata()`` and
``render_to_string()`` additionally run the format encoder.

Rendering is synchronous and shares no mutable state between calls.
"""

from __future__ import annotations

import warnings
from collections.abc import Iterable, Mapping
from typing import Any

from perch import context
from perch._internal.assigns import (
    INNER_CONTENT_KEY,
    LAYOUT_KEY,
    RESOURCE_AS_KEY,
    coerce_assigns,
)
from perch._internal.types import Assigns, IOData
from perch.errors import InvalidLayoutError
from perch.templating.encoders import iodata_to_string
from perch.templating.registry import Registry, default_registry
from perch.view import View

AssignsLike = Mapping[str, Any] | Iterable[tuple[str, Any]] | None


def render(view: type[View], template: str, assigns: AssignsLike = None) -> Any:
    """Render *template* from *view*, wrapped in a layout if one is given.

    The reserved ``layout`` assign takes a ``(LayoutView, "name")``
    tuple. The inner result is bound as ``inner_content`` for the
    layout template; ``None`` or ``False`` render without a layout.

    Raises:
        InvalidLayoutError: If ``layout`` is not a view/name pair.
        TemplateUndefinedError: If *template* cannot be resolved.
    """
    assigns = coerce_assigns(assigns)
    layout = assigns.pop(LAYOUT_KEY, None)
    if layout is None or layout is False:
        return view.render(template, assigns)

    layout_view, layout_template = _validate_layout(layout)
    content = view.render(template, assigns)
    return layout_view.render(layout_template, {**assigns, INNER_CONTENT_KEY: content})


def render_layout(
    view: type[View],
    template: str,
    assigns: AssignsLike,
    inner_content: Any,
) -> Any:
    """Render a layout around already-rendered content.

    Used to nest layouts from inside a template body: the outer layout
    receives *inner_content* as ``inner_content``.
    """
    assigns = coerce_assigns(assigns)
    assigns[INNER_CONTENT_KEY] = inner_content
    return view.render(template, assigns)


def render_many(
    collection: Iterable[Any],
    view: type[View],
    template: str,
    assigns: AssignsLike = None,
) -> list[Any]:
    """Render *template* once per element of *collection*, in order.

    Each element is bound under the view's resource name (``user`` for
    ``UserView``), or under ``assigns["as"]`` when given. The collection
    is consumed in a single pass, so generators work.
    """
    assigns = coerce_assigns(assigns)
    key = _resource_key(assigns, view)
    return [render(view, template, {**assigns, key: resource}) for resource in collection]


def render_one(
    resource: Any,
    view: type[View],
    template: str,
    assigns: AssignsLike = None,
) -> Any:
    """Render *template* for a single resource, or return ``None`` for ``None``."""
    if resource is None:
        return None
    assigns = coerce_assigns(assigns)
    assigns[_resource_key(assigns, view)] = resource
    return render(view, template, assigns)


def render_to_iodata(
    view: type[View],
    template: str,
    assigns: AssignsLike = None,
    *,
    registry: Registry | None = None,
) -> IOData:
    """Render and encode with the encoder for *template*'s format.

    Formats without an encoder pass the rendered value through.
    """
    content = render(view, template, assigns)
    encoder = (registry or default_registry()).encoder(template)
    if encoder is None:
        return content
    return encoder.encode(content)


def render_to_string(
    view: type[View],
    template: str,
    assigns: AssignsLike = None,
    *,
    registry: Registry | None = None,
) -> str:
    """Render, encode, and flatten the result into one string."""
    return iodata_to_string(render_to_iodata(view, template, assigns, registry=registry))


def render_existing(view: type[View], template: str, assigns: AssignsLike = None) -> Any:
    """Render *template* if *view* can, otherwise return ``None``.

    .. deprecated::
        Check for an explicit method on the view instead.
    """
    warnings.warn(
        "render_existing() is deprecated; check for an explicit method on the view instead",
        DeprecationWarning,
        stacklevel=2,
    )
    with context.soft_request_scope(view, template):
        return render(view, template, assigns)


def _validate_layout(layout: object) -> tuple[type[View], str]:
    match layout:
        case (type() as layout_view, str() as layout_template) if issubclass(layout_view, View):
            return layout_view, layout_template
        case _:
            raise InvalidLayoutError(layout)


def _resource_key(assigns: Assigns, view: type[View]) -> str:
    return assigns.get(RESOURCE_AS_KEY) or view.__resource__
