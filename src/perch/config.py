"""Template and view configuration.

Frozen dataclasses — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_PATTERN = "*"


@dataclass(frozen=True, slots=True)
class TemplateConfig:
    """Process-level template configuration. Immutable after creation.

    Engines and encoders are keyed by extension without the leading dot.
    Mapping an extension to ``None`` removes the default for it::

        config = TemplateConfig(
            template_engines={"md": MarkdownEngine()},
            format_encoders={"js": None},
        )
    """

    # Extension -> engine overrides, merged over the defaults
    template_engines: Mapping[str, Any] = field(default_factory=dict)

    # Format extension -> encoder overrides, merged over the defaults
    format_encoders: Mapping[str, Any] = field(default_factory=dict)

    # Anything with a ``dumps(value)`` callable
    json_library: Any = json

    # Forwarded to the kida environment of the default markup engine
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True


@dataclass(frozen=True, slots=True)
class ViewOptions:
    """Setup options of one view, resolved once when the class is built.

    ``root_path`` is the final lookup directory: ``root`` joined with the
    explicit ``path``, or with the path derived from the view's name.
    """

    root: str | Path
    root_path: str
    namespace: str
    pattern: str = DEFAULT_PATTERN
    path: str | None = None
    template_engines: Mapping[str, Any] = field(default_factory=dict)
