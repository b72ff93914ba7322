"""In-process task registry with deadline reminders and fixed-interval recurrence."""

from .errors import InvalidRecurrenceConfig, TaskRegistryError
from .tasks import CatchUpPolicy, Priority, Reminder, ReminderScheduler, Task, TaskStore

__all__ = [
    "CatchUpPolicy",
    "InvalidRecurrenceConfig",
    "Priority",
    "Reminder",
    "ReminderScheduler",
    "Task",
    "TaskRegistryError",
    "TaskStore",
]
