"""Todo API - lists, tasks and user accounts over a JSON HTTP API."""

__version__ = "1.0.0"
