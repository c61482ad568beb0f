"""Shared type aliases used across perch modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Input data passed into a template at render time
Assigns: TypeAlias = dict[str, Any]

# Compiled template: assigns in, rendered value out
RenderUnit: TypeAlias = Callable[[Assigns], Any]

# Immutable per-view mapping from template name to render unit
DispatchTable: TypeAlias = Mapping[str, RenderUnit]

# str, bytes, or arbitrarily nested lists/tuples of those
IOData: TypeAlias = Any
