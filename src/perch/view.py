"""Views — classes that own a directory of compiled templates.

A view is set up once, when its class is created. Setup discovers the
templates under the view's lookup root and compiles them into a
read-only table::

    class AppView(View, root="templates", namespace="myapp"):
        pass

    # myapp/views.py
    class UserView(AppView):            # looks in templates/views/user
        @renders("show.json")
        def show_json(cls, assigns):
            return {"name": assigns["user"].name}

Options (keyword arguments on the class statement):

- ``root`` (required): template root directory
- ``path``: lookup path within ``root``. Defaults to the underscored
  view name with the namespace and the ``View`` suffix removed. A blank
  string uses ``root`` directly.
- ``namespace``: dotted prefix dropped when deriving the path.
  Defaults to the first segment of the view's module.
- ``pattern``: glob applied under the lookup root, default ``"*"``
- ``template_engines``: per-view engine overrides
- ``registry``: explicit ``Registry``; defaults to the process-wide one

Subclasses inherit their parent's options (except ``path``), may
override any of them, and compile their own directory. ``@renders`` clauses belong
to the class that declares them and are not inherited.

Resolution order for ``View.render(name, assigns)``:

1. a ``@renders(name)`` clause declared on the class
2. the compiled template named ``name``
3. the not-found fallback, reaching ``template_not_found`` at most once
   per missing name
"""

from __future__ import annotations

import types
from collections.abc import Callable, Iterable, Mapping
from typing import Any, ClassVar, TypeVar

from perch._internal.assigns import coerce_assigns
from perch._internal.types import Assigns
from perch.config import ViewOptions
from perch.errors import ConfigurationError
from perch.templating import discovery
from perch.templating.compiler import (
    VIEW_SUFFIX,
    CompiledTemplates,
    compile_templates,
    resolve_options,
)
from perch.templating.registry import Registry, default_registry

F = TypeVar("F", bound=Callable[..., Any])

_CLAUSE_ATTR = "__perch_renders__"
_INHERITED_OPTIONS = ("root", "namespace", "pattern", "template_engines", "registry")


def renders(*templates: str) -> Callable[[F], F]:
    """Declare an explicit render clause for one or more template names.

    The decorated function receives the view class and the assigns.
    Explicit clauses take precedence over compiled templates and may
    delegate to them with ``cls.render_template()``::

        @renders("edit.html")
        def edit(cls, assigns):
            return cls.render_template("form.html", assigns)
    """

    def decorator(func: F) -> F:
        target = func.__func__ if isinstance(func, (classmethod, staticmethod)) else func
        existing = getattr(target, _CLAUSE_ATTR, ())
        setattr(target, _CLAUSE_ATTR, (*existing, *templates))
        return func

    return decorator


class View:
    """Base class for views. See the module docstring for options."""

    __view_options__: ClassVar[ViewOptions]
    __view_setup__: ClassVar[dict[str, Any]]
    __templates__: ClassVar[CompiledTemplates]
    __templates_root__: ClassVar[str]
    __templates_pattern__: ClassVar[str]
    __render_clauses__: ClassVar[Mapping[str, Callable[[Assigns], Any]]]
    __resource__: ClassVar[str]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        given = {key: kwargs.pop(key) for key in (*_INHERITED_OPTIONS, "path") if key in kwargs}
        super().__init_subclass__(**kwargs)
        inherited = getattr(cls, "__view_setup__", None) or {}
        setup_view(cls, **{**inherited, **given})

    # -- Local rendering --

    @classmethod
    def render(
        cls,
        template: str,
        assigns: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
    ) -> Any:
        """Render *template* with this view. Layouts are not applied."""
        if not isinstance(template, str):
            msg = f"render() expects template to be a string, got: {template!r}"
            raise TypeError(msg)
        assigns = coerce_assigns(assigns)
        clause = cls.__render_clauses__.get(template)
        if clause is not None:
            return clause(assigns)
        return cls.__templates__.dispatch(cls, template, assigns)

    @classmethod
    def render_template(
        cls,
        template: str,
        assigns: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
    ) -> Any:
        """Render a compiled template, bypassing explicit clauses."""
        return cls.__templates__.dispatch(cls, template, coerce_assigns(assigns))

    @classmethod
    def template_not_found(cls, template: str, assigns: Assigns) -> Any:
        """Called when *template* is neither a clause nor compiled.

        Override to render a fallback. The default raises
        ``TemplateUndefinedError``.
        """
        raise cls.__templates__.undefined(cls, template)

    # -- Introspection --

    @classmethod
    def templates(cls) -> tuple[str, str, tuple[str, ...]]:
        """Return ``(root, pattern, compiled names)``."""
        return cls.__templates__.templates()

    @classmethod
    def needs_recompile(cls) -> bool:
        """Whether templates were added or removed since setup."""
        return cls.__templates__.needs_recompile()


def setup_view(
    view: type[View],
    *,
    root: Any = None,
    path: str | None = None,
    namespace: str | None = None,
    pattern: str | None = None,
    template_engines: Mapping[str, Any] | None = None,
    registry: Registry | None = None,
) -> type[View]:
    """Compile *view*'s templates and attach them to the class.

    Called automatically when a ``View`` subclass is created.

    Raises:
        ConfigurationError: If ``root`` is missing, or if the view was
            already set up.
    """
    if "__templates__" in view.__dict__:
        msg = (
            f"setup_view() is being called twice on {view.__qualname__}. "
            "Make sure to set up each view only once"
        )
        raise ConfigurationError(msg)

    view_name = f"{view.__module__}.{view.__name__}"
    options = resolve_options(
        view_name,
        root=root,
        path=path,
        namespace=namespace,
        pattern=pattern,
        template_engines=template_engines,
    )
    compiled = compile_templates(options, registry or default_registry())

    view.__view_setup__ = {
        "root": root,
        "namespace": namespace,
        "pattern": pattern,
        "template_engines": template_engines,
        "registry": registry,
    }
    view.__view_options__ = options
    view.__templates__ = compiled
    view.__templates_root__ = compiled.root
    view.__templates_pattern__ = compiled.pattern
    view.__render_clauses__ = types.MappingProxyType(_collect_clauses(view))
    if "__resource__" not in view.__dict__:
        view.__resource__ = discovery.resource_name(view_name, VIEW_SUFFIX)
    return view


def _collect_clauses(view: type[View]) -> dict[str, Callable[[Assigns], Any]]:
    clauses: dict[str, Callable[[Assigns], Any]] = {}
    for attr, value in view.__dict__.items():
        if isinstance(value, staticmethod):
            func, bound = value.__func__, value.__func__
        elif isinstance(value, classmethod):
            func, bound = value.__func__, getattr(view, attr)
        elif isinstance(value, types.FunctionType):
            func, bound = value, types.MethodType(value, view)
        else:
            continue
        for template in getattr(func, _CLAUSE_ATTR, ()):
            clauses[template] = bound
    return clauses
