"""
Terminal presentation for Kioku.

Components:
- render: Rich markup for card faces and statuses
- cli: Typer application (kioku add / list / topics / delete / due / study)
"""

from .render import FrontSide, render_back, render_front, style_status

__all__ = [
    "FrontSide",
    "render_back",
    "render_front",
    "style_status",
]
