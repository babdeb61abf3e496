"""
Client-side task state: the store, the API clients that feed it and the
actions that tie the two together.
"""

from .actions import ActionResult, TaskActions
from .api import FixtureTaskApi, HttpTaskApi, TaskApi
from .store import TaskStore

__all__ = [
    "ActionResult",
    "FixtureTaskApi",
    "HttpTaskApi",
    "TaskActions",
    "TaskApi",
    "TaskStore",
]
