"""Template engines — compile source files into render units.

An engine turns one file into a callable taking assigns. Engines are
selected by the file's last extension (``index.html.kida`` -> ``kida``).

Built-in engines:

- ``KidaEngine`` (``.kida``): kida templates. Templates whose format is
  HTML-like (``MARKUP_FORMATS``, including ``.js``) render to ``Markup``
  with autoescaping, everything else to plain strings.
- ``PythonEngine`` (``.pyt``): a single Python expression evaluated with
  ``assigns`` in scope. Used for data formats such as JSON::

      # show.json.pyt
      {"name": assigns["user"].name}
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from kida import Environment, Markup

from perch._internal.types import Assigns, RenderUnit

# Output formats rendered with autoescaping into Markup. Matches the formats
# the default registry encodes with HTMLEncoder, which passes Markup through.
MARKUP_FORMATS = frozenset({".html", ".htm", ".js", ".xml", ".svg"})


@runtime_checkable
class Engine(Protocol):
    """Compiles a template file into a render unit."""

    def compile(self, path: str, name: str) -> RenderUnit: ...


class KidaEngine:
    """Compile kida templates.

    Two environments are kept: an autoescaping one for markup formats and
    a raw one for text formats. Both are created lazily on first compile
    and shared by every template this engine compiles.
    """

    __slots__ = ("_autoescape", "_lstrip_blocks", "_markup_env", "_text_env", "_trim_blocks")

    def __init__(
        self,
        *,
        autoescape: bool = True,
        trim_blocks: bool = True,
        lstrip_blocks: bool = True,
    ) -> None:
        self._autoescape = autoescape
        self._trim_blocks = trim_blocks
        self._lstrip_blocks = lstrip_blocks
        self._markup_env: Environment | None = None
        self._text_env: Environment | None = None

    def compile(self, path: str, name: str) -> RenderUnit:
        source = Path(path).read_text(encoding="utf-8")
        is_markup = posixpath.splitext(name)[1] in MARKUP_FORMATS
        template = self._environment(markup=is_markup).from_string(source, name=name)

        if is_markup:

            def render_markup(assigns: Assigns) -> Markup:
                return Markup(template.render(assigns))

            return render_markup

        def render_text(assigns: Assigns) -> str:
            return template.render(assigns)

        return render_text

    def _environment(self, *, markup: bool) -> Environment:
        if markup:
            if self._markup_env is None:
                self._markup_env = self._create(autoescape=self._autoescape)
            return self._markup_env
        if self._text_env is None:
            self._text_env = self._create(autoescape=False)
        return self._text_env

    def _create(self, *, autoescape: bool) -> Environment:
        return Environment(
            autoescape=autoescape,
            trim_blocks=self._trim_blocks,
            lstrip_blocks=self._lstrip_blocks,
        )

    def __repr__(self) -> str:
        return f"KidaEngine(autoescape={self._autoescape})"


class PythonEngine:
    """Compile a file holding one Python expression.

    ``.pyt`` files are trusted code: they are evaluated, not sandboxed, so
    only load them from directories you control. The expression sees
    ``assigns`` and nothing else besides builtins.
    Compilation errors surface at build time with the file's path.
    """

    __slots__ = ()

    def compile(self, path: str, name: str) -> RenderUnit:
        source = Path(path).read_text(encoding="utf-8")
        code = compile(source, path, "eval")

        def render(assigns: Assigns) -> Any:
            return eval(code, {"__name__": name}, {"assigns": assigns})  # noqa: S307

        return render

    def __repr__(self) -> str:
        return "PythonEngine()"
