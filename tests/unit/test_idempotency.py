import re
import uuid

from src.walletfarm.auth.idempotency import new_idempotency_key

UUID4_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)


def test_keys_are_unique():
    keys = [new_idempotency_key() for _ in range(10_000)]

    assert len(set(keys)) == len(keys)


def test_keys_are_uuid4_text():
    for _ in range(100):
        key = new_idempotency_key()
        assert UUID4_RE.match(key)
        assert uuid.UUID(key).version == 4
