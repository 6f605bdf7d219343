"""
Typed errors raised by the engine and the record stores.
"""


class InvalidRecordError(ValueError):
    """A trade or cash move that cannot be computed on (bad outcome, amount or date)."""

    def __init__(self, record_id, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Invalid record {record_id!r}: {reason}")


class StoreUnavailableError(RuntimeError):
    """Raised when the remote store rejects a write."""
