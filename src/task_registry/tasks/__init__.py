"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, Reminder, CatchUpPolicy)
- task_store.py: in-memory registry (id assignment, add/edit/delete/list)
- task_scheduler.py: one cancellable reminder per task, recurring re-arm
- timers.py: clock and timer backends (threading.Timer, asyncio call_later)
- notifiers.py: ready-made reminder sinks (console, logging)
"""

from .task_models import CatchUpPolicy, Priority, Reminder, Task
from .task_scheduler import ReminderScheduler
from .task_store import TaskStore

__all__ = [
    "CatchUpPolicy",
    "Priority",
    "Reminder",
    "ReminderScheduler",
    "Task",
    "TaskStore",
]
