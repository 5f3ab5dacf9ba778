"""shiftmark - annotate department rosters with shift codes from attendance punches."""

__version__ = "0.1.0"
