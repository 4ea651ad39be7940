"""Free-text task parsing: turn "Buy groceries tomorrow at 3pm" into a task."""

__version__ = "0.1.0"
