# tests/conftest.py

from datetime import datetime, timedelta, timezone

import pytest
from pgpy import PGPKey

import keygen


def load_key(armored: str) -> PGPKey:
    key, _ = PGPKey.from_blob(armored)
    return key


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture(scope="module")
def hello_world_request():
    next_year = datetime.now(timezone.utc) + timedelta(days=365)
    return keygen.KeyPairRequest(
        identity_name="Hello World",
        identity_email="hello@example.com",
        passphrase="Hello World",
        kind="default",
        expires_at=next_year.isoformat(),
    )


@pytest.fixture(scope="module")
def hello_world_key_pair(hello_world_request):
    return keygen.generate(hello_world_request)
