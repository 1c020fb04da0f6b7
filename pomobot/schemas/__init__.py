from .task import TaskCreate, TaskRead

__all__ = [
    "TaskCreate",
    "TaskRead",
]
