"""Core pipeline for the calendar composer."""
