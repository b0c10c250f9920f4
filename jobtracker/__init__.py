"""Personal job-application tracker with trophies and resume export."""

__version__ = "0.1.0"
