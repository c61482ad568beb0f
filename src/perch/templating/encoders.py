"""Format encoders — turn rendered values into final output.

Templates render to an inner representation: ``Markup`` for HTML, plain
data for JSON. Encoders run once the view layer is done and produce
iodata (``str``, ``bytes``, or nested lists of those).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from kida import Markup

from perch._internal.types import IOData


@runtime_checkable
class Encoder(Protocol):
    """Serializes a rendered value for one output format."""

    def encode(self, value: Any) -> IOData: ...


class HTMLEncoder:
    """Encode rendered values as HTML.

    ``Markup`` (anything with ``__html__``) passes through untouched,
    other strings are escaped, lists keep their shape, ``None`` renders
    as nothing.
    """

    __slots__ = ()

    def encode(self, value: Any) -> IOData:
        if value is None:
            return ""
        if isinstance(value, Markup):
            return str(value)
        if hasattr(value, "__html__"):
            return str(value.__html__())
        if isinstance(value, (list, tuple)):
            return [self.encode(item) for item in value]
        if isinstance(value, bytes):
            return value
        return str(Markup.escape(str(value)))

    def __repr__(self) -> str:
        return "HTMLEncoder()"


class JSONEncoder:
    """Encode rendered data as compact JSON.

    Args:
        library: Module or object exposing ``dumps``. Defaults to the
            standard library ``json``.
    """

    __slots__ = ("_library",)

    def __init__(self, library: Any = json) -> None:
        self._library = library

    def encode(self, value: Any) -> IOData:
        if self._library is json:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_default)
        return self._library.dumps(value)

    def __repr__(self) -> str:
        return f"JSONEncoder(library={getattr(self._library, '__name__', self._library)!r})"


def default_encoders(json_library: Any = json) -> dict[str, Encoder]:
    """Return the built-in format encoders keyed by extension."""
    html = HTMLEncoder()
    return {"html": html, "json": JSONEncoder(json_library), "js": html}


def iodata_to_string(data: IOData) -> str:
    """Flatten iodata into a single string.

    Bytes are decoded as UTF-8. Values that are not iodata (for example
    the raw result of a format without an encoder) are converted with
    ``str()``.
    """
    if isinstance(data, str):
        return str(data)
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8")
    if isinstance(data, (list, tuple)):
        return "".join(iodata_to_string(item) for item in data)
    return str(data)


def _default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    if hasattr(value, "__dataclass_fields__"):
        from dataclasses import asdict

        return asdict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)
