"""Idempotency keys for state-mutating platform calls."""
import uuid


def new_idempotency_key() -> str:
    """Return a fresh random UUID4 in canonical textual form.

    One key is consumed by exactly one call attempt and is never reused,
    not even to retry the same logical operation.
    """
    return str(uuid.uuid4())
