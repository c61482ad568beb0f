"""Compile a view's templates into an immutable dispatch table.

Runs once per view, when the view class is set up:

1. Resolve the lookup root from the view options
2. Discover ``root/pattern.{ext,...}`` for every known engine extension
3. Compile each file with the engine for its extension and bind it
   under its template name
4. Record the discovery hash for ``needs_recompile()``

Names that miss the table go through the fallback chain in
``CompiledTemplates.fallback()``: soft requests resolve to ``None``,
a name that already failed once raises, anything else reaches the
view's ``template_not_found`` hook exactly once.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from perch import context
from perch._internal.types import Assigns, DispatchTable, RenderUnit
from perch.config import DEFAULT_PATTERN, ViewOptions
from perch.errors import ConfigurationError, TemplateUndefinedError
from perch.templating import discovery
from perch.templating.engines import Engine
from perch.templating.registry import Registry, merge_enabled

if TYPE_CHECKING:
    from perch.view import View

logger = logging.getLogger("perch.templating")

VIEW_SUFFIX = "View"


def resolve_options(
    view_name: str,
    *,
    root: str | os.PathLike[str] | None,
    path: str | None = None,
    namespace: str | None = None,
    pattern: str | None = None,
    template_engines: Mapping[str, Any] | None = None,
) -> ViewOptions:
    """Validate setup options and resolve the lookup root.

    The namespace defaults to the first segment of *view_name*. Without
    an explicit *path* the lookup path is derived from the view name:
    ``app.admin.UserView`` in namespace ``app`` looks in
    ``root/admin/user``. A blank *path* uses *root* directly.

    Raises:
        ConfigurationError: If *root* is missing or empty.
    """
    if root is None or not os.fspath(root):
        msg = f"expected 'root' to be given as an option for {view_name}"
        raise ConfigurationError(msg)

    if namespace is None:
        namespace = view_name.split(".", 1)[0]

    if path is None:
        path = discovery.module_to_template_root(view_name, namespace, VIEW_SUFFIX)

    root_path = os.path.join(os.fspath(root), path) if path else os.fspath(root)
    return ViewOptions(
        root=root,
        root_path=root_path,
        namespace=namespace,
        pattern=pattern or DEFAULT_PATTERN,
        path=path,
        template_engines=dict(template_engines or {}),
    )


@dataclass(frozen=True, slots=True)
class CompiledTemplates:
    """A view's compiled templates. Never mutated after compilation.

    Attributes:
        root: Resolved lookup root.
        pattern: Glob pattern the templates were discovered with.
        engines: Extension -> engine map used for discovery.
        table: Template name -> render unit.
        digest: Discovery hash at compile time.
    """

    root: str
    pattern: str
    engines: Mapping[str, Engine]
    table: DispatchTable
    digest: str

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.table)

    def templates(self) -> tuple[str, str, tuple[str, ...]]:
        """Return ``(root, pattern, names)`` for introspection."""
        return self.root, self.pattern, self.names

    def needs_recompile(self) -> bool:
        """Whether templates were added or removed since compilation."""
        return self.digest != discovery.hash(self.root, self.pattern, self.engines)

    def dispatch(self, view: type[View], template: str, assigns: Assigns) -> Any:
        """Render *template* from the table, or run the fallback chain."""
        unit = self.table.get(template)
        if unit is not None:
            return unit(assigns)
        return self.fallback(view, template, assigns)

    def fallback(self, view: type[View], template: str, assigns: Assigns) -> Any:
        if context.is_soft_request(view, template):
            return None
        if context.in_not_found(view, template):
            raise self.undefined(view, template)
        logger.debug("Template %r not found for %s", template, view.__qualname__)
        with context.not_found_scope(view, template):
            return view.template_not_found(template, assigns)

    def undefined(self, view: type[View], template: str) -> TemplateUndefinedError:
        return TemplateUndefinedError(
            template,
            view=view.__qualname__,
            root=self.root,
            pattern=self.pattern,
            available=self.names,
        )


def compile_templates(options: ViewOptions, registry: Registry) -> CompiledTemplates:
    """Discover and compile every template under the view's lookup root.

    Raises:
        ConfigurationError: If two files map to the same template name.
    """
    engines = merge_enabled(registry.engines, options.template_engines)
    root = options.root_path
    paths = discovery.find_all(root, options.pattern, engines)

    table: dict[str, RenderUnit] = {}
    sources: dict[str, str] = {}
    for path in paths:
        ext = _engine_extension(path, engines)
        name = discovery.template_path_to_name(path, root, ext=ext)
        if name in table:
            msg = (
                f"templates {sources[name]!r} and {path!r} both compile to "
                f"{name!r}; remove or rename one of them"
            )
            raise ConfigurationError(msg)
        table[name] = engines[ext].compile(path, name)
        sources[name] = path

    logger.debug("Compiled %d template(s) from %s", len(table), root)
    return CompiledTemplates(
        root=root,
        pattern=options.pattern,
        engines=MappingProxyType(engines),
        table=MappingProxyType(table),
        digest=discovery.digest_paths(paths),
    )


def _engine_extension(path: str, engines: Mapping[str, Engine]) -> str:
    """Return the longest engine extension *path* ends with."""
    filename = Path(path).name
    matches = [ext for ext in engines if filename.endswith(f".{ext}")]
    if not matches:
        msg = f"no template engine registered for {path!r}"
        raise ConfigurationError(msg)
    return max(matches, key=len)
