"""
Kioku: spaced-repetition flashcards for the terminal.

Subpackages:
- core: Card model, SM-2 scheduler, status classifier, clock, errors
- study: Session queue state machine and per-learner service
- db: Card repositories and session persistence
- delivery: Typer/Rich command-line presentation
"""

__version__ = "1.0.0"
