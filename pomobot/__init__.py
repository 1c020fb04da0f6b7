"""Task list and pomodoro timer chat bot."""

__version__ = "0.3.0"
