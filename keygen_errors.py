"""The errors which can occur while generating a PGP key pair"""
from typing import List, Optional


class KeyPairGenerationError(Exception):
    """Base class for every failure while generating a key pair. Carries a
    human-readable summary and, where there is one, the underlying error
    reported by the PGP library.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message if cause is None else f"{message}: {cause}")
        self.message: str = message
        """The summary of what went wrong"""

        self.cause: Optional[BaseException] = cause
        """The underlying error, if any"""


class InvalidKindError(KeyPairGenerationError):
    """The requested kind does not name a known key profile"""


class InvalidExpirationError(KeyPairGenerationError):
    """The expiration was set but is not an RFC3339 timestamp"""


class KeyGenerationError(KeyPairGenerationError):
    """The PGP library failed to generate the key material"""


class KeyLockError(KeyPairGenerationError):
    """The private key could not be protected with the passphrase"""


class PrivateArmorError(KeyPairGenerationError):
    """The locked private key could not be armored"""


class PublicArmorError(KeyPairGenerationError):
    """The public key could not be armored"""


class KeyPairGenerationErrors(KeyPairGenerationError):
    """More than one independent step failed during the same attempt"""

    def __init__(self, errors: List[KeyPairGenerationError]) -> None:
        super().__init__("; ".join(str(e) for e in errors), errors[0])
        self.errors: List[KeyPairGenerationError] = list(errors)
        """Every error reported, in the order the steps ran"""
