"""
Exceptions raised out of snapshot assembly and querying.

Hierarchy:
    KairosStateError
        ├── EnumerationError
        └── QueryError

Everything else an inspector can hit (missing tools, unreadable files, garbage
output) is absorbed where it happens and never leaves the inspector.
"""


class KairosStateError(Exception):
    """Base class for kairos-state errors."""


class EnumerationError(KairosStateError):
    """The block-device enumerator could not run at all.

    When raised from snapshot assembly, ``runtime`` holds the partial snapshot:
    boot state, hardware facts and Kairos info are set, partitions are not.
    """

    def __init__(self, message: str, runtime=None):
        super().__init__(message)
        self.runtime = runtime


class QueryError(KairosStateError):
    """A query expression failed to compile or errored while running."""

    def __init__(self, expression: str, reason: str):
        super().__init__(f"query {expression!r}: {reason}")
        self.expression = expression
        self.reason = reason
