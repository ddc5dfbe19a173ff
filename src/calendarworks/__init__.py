"""CalendarWorks: batch tooling for calendar page composites."""

__version__ = "0.1.0"
