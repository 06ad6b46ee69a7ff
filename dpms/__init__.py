"""Digital prescription management: payload visibility and medication reminders."""

__version__ = "0.1.0"
