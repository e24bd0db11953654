"""Default work area and G-code snippets for a new project."""

from ..gcode.snippets import GCodeSnippet, SnippetHook

DEFAULT_WORK_AREA = (1000.0, 1000.0)   # work-surface units


def build_default_snippets() -> list[GCodeSnippet]:
    """Header and footer wrapped around every generated program."""
    return [
        GCodeSnippet(
            name="Header",
            hook=SnippetHook.BEFORE_ALL,
            template="{{unit_modal}} ; units\nG90 ; absolute\nG0 Z{{safe_height}}\n",
            description="Units, absolute positioning, safe height",
        ),
        GCodeSnippet(
            name="Footer",
            hook=SnippetHook.AFTER_ALL,
            template="M5 ; dispenser off\nG0 Z{{safe_height}}\nG0 X0 Y0\n",
        ),
    ]
