"""Portfolio terminal widget: window chrome, command shell and session persistence."""

__version__ = "0.1.0"
