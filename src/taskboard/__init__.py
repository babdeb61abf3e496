"""
Taskboard: a small task-management service.

The FastAPI application lives in `taskboard.main`; the client-side state,
query and form layers live in `taskboard.client`, `taskboard.query` and
`taskboard.forms`.
"""

__version__ = "0.1.0"
