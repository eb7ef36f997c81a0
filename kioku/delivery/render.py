"""
Card rendering for the terminal.

Builds Rich markup for the two faces of a card. Which face comes first is
a learner setting; the reading (pronunciation aid) can be shown with the
front face or only after flipping.
"""

from __future__ import annotations

from enum import Enum

from rich.markup import escape

from kioku.core.card import Card
from kioku.core.status import CardStatus

STATUS_STYLES = {
    CardStatus.NEW: "dim",
    CardStatus.LIGHTLY_LEARNED: "yellow",
    CardStatus.NEARLY_LEARNED: "cyan",
    CardStatus.LEARNED: "green",
}

# Grade buttons offered after flipping, in display order
GRADE_CHOICES = [
    (0, "Don't remember"),
    (3, "Poor"),
    (4, "Remember"),
    (5, "Know it perfectly"),
]


class FrontSide(str, Enum):
    """Which face of a card is shown first."""

    FRONT = "front"
    BACK = "back"


def style_status(status: CardStatus) -> str:
    """Get styled status string."""
    color = STATUS_STYLES.get(status, "white")
    return f"[{color}]{status.label}[/{color}]"


def render_front(card: Card, side: FrontSide = FrontSide.FRONT, show_reading: bool = False) -> str:
    """Markup for the face shown before flipping."""
    if side is FrontSide.FRONT:
        text = f"[bold]{escape(card.front)}[/bold]"
        if show_reading and card.reading:
            text += f"\n[italic]{escape(card.reading)}[/italic]"
    else:
        text = f"[bold]{escape(card.back)}[/bold]"
    return f"{text}\n\n[dim]Status:[/dim] {style_status(card.status)}"


def render_back(card: Card, side: FrontSide = FrontSide.FRONT) -> str:
    """Markup for both faces after flipping."""
    reading = f"[italic]{escape(card.reading)}[/italic]" if card.reading else None

    if side is FrontSide.FRONT:
        lines = [f"[bold]{escape(card.front)}[/bold]"]
        if reading:
            lines.append(reading)
        lines += ["---", f"[bold]{escape(card.back)}[/bold]"]
    else:
        lines = [f"[bold]{escape(card.back)}[/bold]", "---", f"[bold]{escape(card.front)}[/bold]"]
        if reading:
            lines.append(reading)

    return "\n".join(lines) + f"\n\n[dim]Status:[/dim] {style_status(card.status)}"
