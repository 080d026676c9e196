import pulumi
from key import Key
from key_profiles import KINDS

config = pulumi.Config()
identity_name = config.require("identity_name")
identity_email = config.require("identity_email")
passphrase = config.require_secret("passphrase")
kind = config.get("kind")
"""default, rfc4880 or rfc9580; the provider falls back to default"""
expires_at = config.get("expires_at")

# the provider checks this as well, but failing here points at the config key
assert kind is None or kind in KINDS, f"expected {kind=} to be one of {KINDS}"

key = Key(
    "key",
    identity_name=identity_name,
    identity_email=identity_email,
    passphrase=passphrase,
    kind=kind,
    expires_at=expires_at,
)

pulumi.export("key_id", key.key_pair.key_id)
pulumi.export("fingerprint", key.key_pair.fingerprint)
pulumi.export("public_key", key.public_key)
pulumi.export("private_key", key.private_key)
