"""Template discovery, engines, encoders, and compilation."""

from perch.templating.discovery import find_all, hash, template_path_to_name
from perch.templating.encoders import Encoder, HTMLEncoder, JSONEncoder
from perch.templating.engines import Engine, KidaEngine, PythonEngine
from perch.templating.registry import Registry, configure, default_registry, reset_registry

__all__ = [
    "Encoder",
    "Engine",
    "HTMLEncoder",
    "JSONEncoder",
    "KidaEngine",
    "PythonEngine",
    "Registry",
    "configure",
    "default_registry",
    "find_all",
    "hash",
    "reset_registry",
    "template_path_to_name",
]
