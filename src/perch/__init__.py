"""Perch — template discovery and view rendering.

Views own a directory of templates. Each template file is compiled once,
when the view class is created, into a render function keyed by its
name. The runtime API renders those functions with layouts, collection
helpers, and per-format encoders.

Basic usage::

    from perch import View, render_to_string

    class UserView(View, root="templates", path="user"):
        pass

    # templates/user/index.html.kida
    render_to_string(UserView, "index.html", {"name": "Ada"})

Layouts::

    render(UserView, "index.html", {"layout": (LayoutView, "app.html")})

Collections::

    render_many(users, UserView, "show.json")
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "ConfigurationError",
    "InvalidLayoutError",
    "PerchError",
    "Registry",
    "TemplateConfig",
    "TemplateUndefinedError",
    "View",
    "configure",
    "default_registry",
    "render",
    "render_existing",
    "render_layout",
    "render_many",
    "render_one",
    "render_to_iodata",
    "render_to_string",
    "renders",
    "setup_view",
]

# Public name -> defining module. Resolved on first attribute access.
_LAZY_IMPORTS: dict[str, str] = {
    "ConfigurationError": "perch.errors",
    "InvalidLayoutError": "perch.errors",
    "PerchError": "perch.errors",
    "TemplateUndefinedError": "perch.errors",
    "TemplateConfig": "perch.config",
    "Registry": "perch.templating.registry",
    "configure": "perch.templating.registry",
    "default_registry": "perch.templating.registry",
    "View": "perch.view",
    "renders": "perch.view",
    "setup_view": "perch.view",
    "render": "perch.rendering",
    "render_existing": "perch.rendering",
    "render_layout": "perch.rendering",
    "render_many": "perch.rendering",
    "render_one": "perch.rendering",
    "render_to_iodata": "perch.rendering",
    "render_to_string": "perch.rendering",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    value = getattr(importlib.import_module(module_name), name)
    globals()[name] = value
    return value
