# src/task_registry/errors.py

from __future__ import annotations


class TaskRegistryError(Exception):
    """Base class for errors raised by task_registry."""


class InvalidRecurrenceConfig(TaskRegistryError, ValueError):
    """
    Recurrence settings rejected at the API boundary.

    Raised for a non-positive interval, and (in strict mode only) for a recurring
    task without an interval.
    """
