"""Describes the kinds of PGP keys which can be generated. A kind names a
profile: the algorithms used for the primary key and the encryption subkey,
together with the preferences advertised on the user id.
"""
from typing import List, Union
from dataclasses import dataclass
from pgpy.constants import (
    CompressionAlgorithm,
    EllipticCurveOID,
    HashAlgorithm,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)
from keygen_errors import InvalidKindError


KIND_DEFAULT = "default"
KIND_RFC4880 = "rfc4880"
KIND_RFC9580 = "rfc9580"

KINDS = (KIND_DEFAULT, KIND_RFC4880, KIND_RFC9580)
"""Every kind which may be requested, in the order they are documented"""

DEFAULT_KIND = KIND_DEFAULT
"""The kind used when none is specified"""

SECURITY_STANDARD = "standard"
SECURITY_HIGH = "high"

SECURITY_LEVELS = (SECURITY_STANDARD, SECURITY_HIGH)


@dataclass(frozen=True)
class KeyProfile:
    """The algorithm choices for a single kind at a single security level"""

    kind: str
    """The kind this profile was resolved from"""

    level: str
    """The security level this profile was resolved at"""

    primary_algorithm: PubKeyAlgorithm
    """The algorithm of the certifying/signing primary key"""

    primary_parameter: Union[int, EllipticCurveOID]
    """The key size in bits for RSA, otherwise the curve"""

    subkey_algorithm: PubKeyAlgorithm
    """The algorithm of the encryption subkey"""

    subkey_parameter: Union[int, EllipticCurveOID]
    """The key size in bits for RSA, otherwise the curve"""

    hashes: List[HashAlgorithm]
    ciphers: List[SymmetricKeyAlgorithm]
    compression: List[CompressionAlgorithm]

    lock_cipher: SymmetricKeyAlgorithm = SymmetricKeyAlgorithm.AES256
    """The cipher used to protect the private key material"""

    lock_hash: HashAlgorithm = HashAlgorithm.SHA256
    """The hash used in the string-to-key derivation of the passphrase"""


_MODERN_HASHES = [HashAlgorithm.SHA512, HashAlgorithm.SHA384, HashAlgorithm.SHA256]
_MODERN_CIPHERS = [
    SymmetricKeyAlgorithm.AES256,
    SymmetricKeyAlgorithm.AES192,
    SymmetricKeyAlgorithm.AES128,
]
_COMPRESSION = [
    CompressionAlgorithm.ZLIB,
    CompressionAlgorithm.BZ2,
    CompressionAlgorithm.ZIP,
    CompressionAlgorithm.Uncompressed,
]


def _curve25519(kind: str, level: str) -> KeyProfile:
    return KeyProfile(
        kind=kind,
        level=level,
        primary_algorithm=PubKeyAlgorithm.EdDSA,
        primary_parameter=EllipticCurveOID.Ed25519,
        subkey_algorithm=PubKeyAlgorithm.ECDH,
        subkey_parameter=EllipticCurveOID.Curve25519,
        hashes=_MODERN_HASHES,
        ciphers=_MODERN_CIPHERS,
        compression=_COMPRESSION,
    )


def _rsa(kind: str, level: str) -> KeyProfile:
    bits = 4096 if level == SECURITY_HIGH else 3072
    return KeyProfile(
        kind=kind,
        level=level,
        primary_algorithm=PubKeyAlgorithm.RSAEncryptOrSign,
        primary_parameter=bits,
        subkey_algorithm=PubKeyAlgorithm.RSAEncryptOrSign,
        subkey_parameter=bits,
        hashes=[
            HashAlgorithm.SHA256,
            HashAlgorithm.SHA384,
            HashAlgorithm.SHA512,
            HashAlgorithm.SHA224,
        ],
        ciphers=_MODERN_CIPHERS,
        compression=_COMPRESSION,
    )


def _nist(kind: str, level: str) -> KeyProfile:
    curve = (
        EllipticCurveOID.NIST_P521
        if level == SECURITY_HIGH
        else EllipticCurveOID.NIST_P384
    )
    return KeyProfile(
        kind=kind,
        level=level,
        primary_algorithm=PubKeyAlgorithm.ECDSA,
        primary_parameter=curve,
        subkey_algorithm=PubKeyAlgorithm.ECDH,
        subkey_parameter=curve,
        hashes=_MODERN_HASHES,
        ciphers=_MODERN_CIPHERS,
        compression=_COMPRESSION,
        lock_hash=HashAlgorithm.SHA512,
    )


_BUILDERS = {
    KIND_DEFAULT: _curve25519,
    KIND_RFC4880: _rsa,
    KIND_RFC9580: _nist,
}


def resolve_profile(kind: str, level: str = SECURITY_HIGH) -> KeyProfile:
    """Resolves the given kind to the profile used to generate keys at the
    given security level.

    Args:
        kind (str): one of `KINDS`
        level (str): one of `SECURITY_LEVELS`; generation always uses high

    Raises:
        InvalidKindError: if the kind is not recognized
        ValueError: if the security level is not recognized
    """
    builder = _BUILDERS.get(kind)
    if builder is None:
        raise InvalidKindError(
            f"Not a valid PGP key kind: {kind!r}, expected one of {', '.join(KINDS)}"
        )

    if level not in SECURITY_LEVELS:
        raise ValueError(f"{level=} must be one of {SECURITY_LEVELS}")

    return builder(kind, level)
