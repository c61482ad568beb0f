"""Render-scoped context via ContextVar.

Tracks which ``(view, template)`` identities are currently inside the
not-found fallback, and which were requested softly through
``render_existing()``. The compiler consults both before invoking a
view's ``template_not_found`` hook:

- a soft request for the exact identity resolves to ``None``
- an identity already in the fallback fails instead of re-entering the
  hook, so a hook that renders the same missing name cannot recurse

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading (3.14t). No locks needed.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

Identity = tuple[type, str]

_not_found_var: ContextVar[frozenset[Identity]] = ContextVar(
    "perch_not_found", default=frozenset()
)
_existing_var: ContextVar[frozenset[Identity]] = ContextVar(
    "perch_render_existing", default=frozenset()
)


def in_not_found(view: type, template: str) -> bool:
    """Whether the fallback already ran once for this identity."""
    return (view, template) in _not_found_var.get()


def is_soft_request(view: type, template: str) -> bool:
    """Whether this identity was requested through ``render_existing()``."""
    return (view, template) in _existing_var.get()


@contextmanager
def not_found_scope(view: type, template: str) -> Iterator[None]:
    """Mark an identity as inside the not-found fallback."""
    token = _not_found_var.set(_not_found_var.get() | {(view, template)})
    try:
        yield
    finally:
        _not_found_var.reset(token)


@contextmanager
def soft_request_scope(view: type, template: str) -> Iterator[None]:
    """Mark an identity as requested softly."""
    token = _existing_var.set(_existing_var.get() | {(view, template)})
    try:
        yield
    finally:
        _existing_var.reset(token)
