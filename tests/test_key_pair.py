# tests/test_key_pair.py

import pytest
from pulumi.runtime import rpc

from conftest import load_key
from key_pair import KeyPairInputs, KeyPairProvider, redact
from keygen_errors import InvalidKindError


def _inputs(**overrides):
    inputs = {
        "identity": {"name": "Hello World", "email": "hello@example.com"},
        "passphrase": "Hello World",
        "kind": "default",
        "expires_at": None,
    }
    inputs.update(overrides)
    return inputs


@pytest.fixture(scope="module")
def created():
    return KeyPairProvider().create(_inputs(expires_at="2099-01-01T00:00:00Z"))


def test_check_fills_default_kind():
    result = KeyPairProvider().check({}, _inputs(kind=None))

    assert result.failures == []
    assert result.inputs["kind"] == "default"


def test_check_reports_every_failure():
    result = KeyPairProvider().check(
        {},
        _inputs(
            identity={"name": "Hello World", "email": ""},
            passphrase="",
            kind="rfc1234",
            expires_at="tomorrow",
        ),
    )

    assert sorted(f.property for f in result.failures) == [
        "expires_at",
        "identity.email",
        "kind",
        "passphrase",
    ]


def test_check_missing_identity():
    news = _inputs()
    del news["identity"]

    result = KeyPairProvider().check({}, news)

    assert [f.property for f in result.failures] == ["identity.name", "identity.email"]


def test_create(created):
    assert created.id
    assert created.outs["key_id"] == created.id
    assert created.outs["fingerprint"].endswith(created.id)
    assert created.outs["identity"] == {
        "name": "Hello World",
        "email": "hello@example.com",
    }
    assert created.outs["kind"] == "default"
    assert created.outs["expires_at"] == "2099-01-01T00:00:00Z"

    public = load_key(created.outs["public_key"])
    assert public.is_public
    assert public.fingerprint.keyid.lower() == created.id

    private = load_key(created.outs["private_key"])
    with private.unlock("Hello World"):
        assert private.is_unlocked


def test_create_failure_writes_redacted_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(InvalidKindError):
        KeyPairProvider().create(_inputs(kind="rfc1234", passphrase="hunter2"))

    error_files = list(tmp_path.glob("key_pair_error_*.txt"))
    assert len(error_files) == 1

    contents = error_files[0].read_text()
    assert "InvalidKindError" in contents
    assert "[secret]" in contents
    assert "hunter2" not in contents


def test_read_is_noop(created):
    result = KeyPairProvider().read(created.id, created.outs)

    assert result.id == created.id
    assert result.outs == created.outs


def test_diff_no_changes(created):
    result = KeyPairProvider().diff(
        created.id, created.outs, _inputs(expires_at="2099-01-01T00:00:00Z")
    )

    assert result.changes is False


@pytest.mark.parametrize(
    "overrides,replaces",
    [
        ({"passphrase": "Goodbye World"}, ["passphrase"]),
        ({"kind": "rfc4880"}, ["kind"]),
        ({"identity": {"name": "Hello World", "email": "bye@example.com"}}, ["identity"]),
        ({"identity": {"name": "Bye", "email": "bye@example.com"}}, ["identity"]),
        (
            {"passphrase": "Goodbye World", "identity": {"name": "Bye", "email": "x@y"}},
            ["passphrase", "identity"],
        ),
    ],
)
def test_diff_replaces_identity_fields(created, overrides, replaces):
    news = _inputs(expires_at="2099-01-01T00:00:00Z", **overrides)

    result = KeyPairProvider().diff(created.id, created.outs, news)

    assert result.changes is True
    assert result.replaces == replaces
    assert result.delete_before_replace is True


def test_diff_expiration_is_in_place(created):
    result = KeyPairProvider().diff(
        created.id, created.outs, _inputs(expires_at="2100-01-01T00:00:00Z")
    )

    assert result.changes is True
    assert result.replaces == []
    assert "private_key" in result.stables


def test_update_keeps_key(created):
    result = KeyPairProvider().update(
        created.id, created.outs, _inputs(expires_at="2100-01-01T00:00:00Z")
    )

    assert result.outs["expires_at"] == "2100-01-01T00:00:00Z"
    for field in ("key_id", "fingerprint", "private_key", "public_key", "passphrase"):
        assert result.outs[field] == created.outs[field]


def test_delete_is_noop(created):
    assert KeyPairProvider().delete(created.id, created.outs) is None


def test_redact():
    props = {"passphrase": "hunter2", "private_key": None, "kind": "default"}

    assert redact(props) == {"passphrase": "[secret]", "private_key": None, "kind": "default"}
    assert props["passphrase"] == "hunter2"


def test_inputs_nest_identity():
    props = vars(KeyPairInputs("Hello World", "hello@example.com", "Hello World"))

    assert props == {
        "identity": {"name": "Hello World", "email": "hello@example.com"},
        "passphrase": "Hello World",
        "kind": None,
        "expires_at": None,
    }


def test_check_skips_unknown_values():
    result = KeyPairProvider().check(
        {}, _inputs(kind=rpc.UNKNOWN, expires_at=rpc.UNKNOWN)
    )

    assert result.failures == []
