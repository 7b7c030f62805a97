"""Constraint validation for client, worker and task record sets."""

__version__ = "0.1.0"
