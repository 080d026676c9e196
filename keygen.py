"""Generates passphrase-protected PGP key pairs. This is the only part of
the key pair resource which does real work: every other lifecycle step
just keeps whatever was generated here.
"""
from typing import List, Optional
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import re
import aniso8601
from pgpy import PGPKey, PGPUID
from pgpy.constants import KeyFlags
from key_profiles import DEFAULT_KIND, SECURITY_HIGH, KeyProfile, resolve_profile
from keygen_errors import (
    InvalidExpirationError,
    KeyGenerationError,
    KeyLockError,
    KeyPairGenerationError,
    KeyPairGenerationErrors,
    PrivateArmorError,
    PublicArmorError,
)


@dataclass(frozen=True)
class KeyPairRequest:
    """What key pair to generate"""

    identity_name: str
    """The real name on the single user id of the key"""

    identity_email: str
    """The email address on the single user id of the key"""

    passphrase: str = field(repr=False)
    """The passphrase which locks the private key"""

    kind: str = DEFAULT_KIND
    """Which profile to generate the key with, see key_profiles.KINDS"""

    expires_at: Optional[str] = None
    """If specified, an RFC3339 timestamp at which the key expires"""


@dataclass(frozen=True)
class KeyPairResult:
    """A freshly generated key pair. Never modified after generation."""

    id: str
    """The hex key id, lowercase"""

    fingerprint: str
    """The hex fingerprint, lowercase"""

    private_key: str = field(repr=False)
    """The passphrase-locked private key in armored form"""

    public_key: str
    """The public key in armored form"""


RFC3339_REGEX = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})", re.ASCII
)
"""The extended format that RFC3339 narrows ISO8601 to. Checked in full before
handing the value to aniso8601, which also accepts basic and reduced formats.
"""


def parse_expiration(value: str) -> datetime:
    """Parses the given RFC3339 timestamp into a timezone-aware datetime.
    An offset (or Z) is required, since otherwise the instant is ambiguous.

    Raises:
        InvalidExpirationError: if the value is not an RFC3339 timestamp
    """
    if not isinstance(value, str) or RFC3339_REGEX.fullmatch(value) is None:
        raise InvalidExpirationError(
            f"Could not parse date specified in `expires_at`: {value!r} is not RFC3339"
        )

    try:
        date = aniso8601.parse_datetime(value.upper())
    except ValueError as e:
        raise InvalidExpirationError(
            "Could not parse date specified in `expires_at`", e
        ) from e

    if not date.tzinfo:
        raise InvalidExpirationError(
            "Could not parse date specified in `expires_at`: missing timezone"
        )
    return date


def lifetime_seconds(expires_at: datetime, now: datetime) -> int:
    """The whole number of seconds from now until the key should expire.
    Zero or negative when the instant is not in the future; this is passed
    along as is rather than corrected.
    """
    return int((expires_at - now).total_seconds())


def generate(request: KeyPairRequest, now: Optional[datetime] = None) -> KeyPairResult:
    """Generates a brand new key pair for the given request. Every call
    produces a different key, even for identical requests, so this never
    retries: any failure is raised to the caller.

    Args:
        request (KeyPairRequest): what to generate
        now (datetime, None): the current time, for computing the lifetime
            from the expiration. Defaults to the actual current time.

    Raises:
        KeyPairGenerationError: the subclass identifies which step failed
    """
    profile = resolve_profile(request.kind, SECURITY_HIGH)

    lifetime: Optional[int] = None
    if request.expires_at is not None:
        expires_at = parse_expiration(request.expires_at)
        if now is None:
            now = datetime.now(timezone.utc)
        lifetime = lifetime_seconds(expires_at, now)

    key = generate_key(
        profile, request.identity_name, request.identity_email, lifetime
    )
    lock_key(key, profile, request.passphrase)
    private_key, public_key = armor_key(key)

    return KeyPairResult(
        id=key.fingerprint.keyid.lower(),
        fingerprint=str(key.fingerprint).replace(" ", "").lower(),
        private_key=private_key,
        public_key=public_key,
    )


def generate_key(
    profile: KeyProfile, name: str, email: str, lifetime: Optional[int] = None
) -> PGPKey:
    """Generates the primary key with a single user id and an encryption
    subkey. The lifetime, if given, is in seconds from now.

    Raises:
        KeyGenerationError: if the PGP library fails at any point
    """
    prefs = {
        "usage": {KeyFlags.Certify, KeyFlags.Sign},
        "hashes": profile.hashes,
        "ciphers": profile.ciphers,
        "compression": profile.compression,
    }
    if lifetime is not None:
        prefs["key_expiration"] = timedelta(seconds=lifetime)

    try:
        key = PGPKey.new(profile.primary_algorithm, profile.primary_parameter)
        key.add_uid(PGPUID.new(name, email=email), **prefs)

        subkey = PGPKey.new(profile.subkey_algorithm, profile.subkey_parameter)
        key.add_subkey(
            subkey,
            usage={KeyFlags.EncryptCommunications, KeyFlags.EncryptStorage},
        )
    except Exception as e:
        raise KeyGenerationError("Could not create PGP key", e) from e

    return key


def lock_key(key: PGPKey, profile: KeyProfile, passphrase: str) -> None:
    """Protects the private material of the key and all its subkeys with
    the given passphrase. The key is left locked.

    Raises:
        KeyLockError: if the key could not be protected
    """
    if not passphrase:
        raise KeyLockError("Could not add passphrase to PGP key: passphrase is empty")

    try:
        key.protect(passphrase, profile.lock_cipher, profile.lock_hash)
    except Exception as e:
        raise KeyLockError("Could not add passphrase to PGP key", e) from e


def armor_key(key: PGPKey):
    """Returns the armored private key and the armored public key. Both are
    attempted even when the first fails so that every problem is reported.

    Raises:
        PrivateArmorError: if only the private key could not be armored
        PublicArmorError: if only the public key could not be armored
        KeyPairGenerationErrors: if neither could be armored
    """
    errors: List[KeyPairGenerationError] = []

    private_key = None
    try:
        private_key = str(key)
    except Exception as e:
        errors.append(PrivateArmorError("Could not generate private key", e))

    public_key = None
    try:
        public_key = str(key.pubkey)
    except Exception as e:
        errors.append(PublicArmorError("Could not generate public key", e))

    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise KeyPairGenerationErrors(errors)

    return private_key, public_key
