"""Console painting with rich styles."""

from __future__ import annotations

from collections.abc import Mapping

from rich.color import ColorSystem
from rich.style import Style

from verity.constants import DEFAULT_PALETTE


class Painter:
    """Paints text by role (``gray``, ``cyan``, ...) when color is enabled."""

    def __init__(self, palette: Mapping[str, str] | None = None, *, enabled: bool = True) -> None:
        colors = DEFAULT_PALETTE if palette is None else palette
        self._styles = {role: Style.parse(color) for role, color in colors.items()}
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def paint(self, text: str, role: str) -> str:
        style = self._styles.get(role)
        if not self._enabled or style is None or not text:
            return text
        return style.render(text, color_system=ColorSystem.STANDARD)


__all__ = ["Painter"]
