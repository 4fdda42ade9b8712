"""taskdesk: console client for the task-tracking service."""

__version__ = "0.1.0"
