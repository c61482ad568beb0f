"""Perch exception hierarchy.

Shared across discovery, the compiler, and the renderer so every module
raises and catches the same types.
"""

from collections.abc import Sequence


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when view configuration is invalid.

    Always raised at build time, while a view class is being set up.
    """


class InvalidLayoutError(PerchError):
    """Raised when the reserved ``layout`` assign has the wrong shape."""

    def __init__(self, layout: object) -> None:
        self.layout = layout
        super().__init__(
            "invalid value for reserved key 'layout' in render() assigns\n\n"
            "'layout' accepts a tuple of the form (LayoutView, \"template.extension\")\n\n"
            f"got: {layout!r}"
        )


class TemplateUndefinedError(PerchError):
    """Raised when a view has no clause and no template for a name.

    Carries the resolved lookup root, the glob pattern, and the names the
    view compiled so the message points at the right directory.
    """

    def __init__(
        self,
        template: str,
        *,
        view: str,
        root: str,
        pattern: str,
        available: Sequence[str] = (),
    ) -> None:
        self.template = template
        self.view = view
        self.root = root
        self.pattern = pattern
        self.available = tuple(available)
        super().__init__(self._message())

    def _message(self) -> str:
        msg = (
            f'Could not render "{self.template}" for {self.view}, please define a '
            f"matching @renders({self.template!r}) clause or define a template at "
            f'"{self.root}" matching "{self.pattern}".'
        )
        if self.available:
            listing = "\n".join(f"* {name}" for name in self.available)
            return f"{msg} The following templates were compiled:\n\n{listing}\n"
        return f"{msg} No templates were compiled for this view."
