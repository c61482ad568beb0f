"""Engine and encoder registry.

A ``Registry`` holds two extension-keyed maps built from a
``TemplateConfig``: engines (source extension -> engine) and encoders
(format extension -> encoder). Overrides are merged over the defaults
and any override set to a falsy value removes the default.

Pass a registry explicitly where you own the configuration::

    registry = Registry.build(TemplateConfig(format_encoders={"js": None}))
    render_to_string(UserView, "show.js", assigns, registry=registry)

Or rely on the process-wide registry, built lazily on first use::

    configure(TemplateConfig(template_engines={"md": MarkdownEngine()}))
    default_registry().engines

Thread safety:
    A published registry is immutable. The process-wide registry is
    published with a Lock + double-check, so concurrent first callers
    all read the same instance.
"""

from __future__ import annotations

import logging
import posixpath
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from perch.config import TemplateConfig
from perch.templating.encoders import Encoder, default_encoders
from perch.templating.engines import Engine, KidaEngine, PythonEngine

logger = logging.getLogger("perch.templating")


@dataclass(frozen=True, slots=True)
class Registry:
    """Immutable engine and encoder maps."""

    engines: Mapping[str, Engine]
    encoders: Mapping[str, Encoder]

    @classmethod
    def build(cls, config: TemplateConfig | None = None) -> Registry:
        """Merge the defaults with *config* overrides."""
        config = config or TemplateConfig()
        defaults: dict[str, Any] = {
            "kida": KidaEngine(
                autoescape=config.autoescape,
                trim_blocks=config.trim_blocks,
                lstrip_blocks=config.lstrip_blocks,
            ),
            "pyt": PythonEngine(),
        }
        engines = merge_enabled(defaults, config.template_engines)
        encoders = merge_enabled(default_encoders(config.json_library), config.format_encoders)
        logger.debug(
            "Built template registry: engines=%s encoders=%s",
            sorted(engines),
            sorted(encoders),
        )
        return cls(engines=MappingProxyType(engines), encoders=MappingProxyType(encoders))

    def encoder(self, template: str) -> Encoder | None:
        """Return the encoder for *template*'s format, or ``None``.

        The format is the trailing extension of the template name:
        ``user/show.json`` -> ``json``.
        """
        ext = posixpath.splitext(template)[1]
        if not ext:
            return None
        return self.encoders.get(ext[1:])


def merge_enabled(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *overrides* over *defaults*, dropping falsy entries."""
    merged = {**defaults, **{_normalize_ext(k): v for k, v in overrides.items()}}
    return {ext: value for ext, value in merged.items() if value}


def _normalize_ext(ext: str) -> str:
    return ext.lstrip(".")


# -- Process-wide registry --

_config: TemplateConfig = TemplateConfig()
_registry: Registry | None = None
_lock = threading.Lock()


def default_registry() -> Registry:
    """Return the process-wide registry, building it on first use."""
    global _registry
    registry = _registry
    if registry is not None:
        return registry
    with _lock:
        if _registry is None:
            _registry = Registry.build(_config)
        return _registry


def configure(config: TemplateConfig) -> None:
    """Install a new process-wide configuration.

    The cached registry is dropped and rebuilt from *config* on next
    use. Views already set up keep the engines they compiled with.
    """
    global _config
    with _lock:
        _config = config
    reset_registry()


def reset_registry() -> None:
    """Drop the cached process-wide registry."""
    global _registry
    with _lock:
        _registry = None
