"""Tasktrack — multi-user task tracking backend.

A small REST service that keeps users and their tasks in flat JSON files,
guarded by bcrypt password hashing and JWT bearer tokens. Every task
operation is scoped to the identity that owns the task.
"""

__version__ = "0.1.0"
