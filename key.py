"""Simple container class for a PGP keypair which is generated by pulumi"""
from typing import Optional
import pulumi
from key_pair import KeyPair, KeyPairInputs


class Key:
    """Describes a PGP keypair which is generated and kept in the stack state"""

    def __init__(
        self,
        resource_name: str,
        identity_name: pulumi.Input[str],
        identity_email: pulumi.Input[str],
        passphrase: pulumi.Input[str],
        kind: Optional[pulumi.Input[str]] = None,
        expires_at: Optional[pulumi.Input[str]] = None,
    ) -> None:
        """Describes a key pair which is generated once, when first deployed,
        and then kept as is until its kind, passphrase or identity changes.

        Args:
            resource_name (str): The name to use prefixing resources created by
                this instance
            identity_name (Input[str]): The real name on the user id of the key
            identity_email (Input[str]): The email address on the user id of the key
            passphrase (Input[str]): The passphrase which locks the private key
            kind (Input[str], None): default, rfc4880 or rfc9580. Defaults to
                default
            expires_at (Input[str], None): RFC3339 timestamp at which the key
                expires. If not specified, the key never expires
        """
        self.resource_name: str = resource_name
        """The name to use to prefix resource names for resources created by this instance"""

        self.key_pair: KeyPair = KeyPair(
            f"{resource_name}-kp",
            KeyPairInputs(
                identity_name=identity_name,
                identity_email=identity_email,
                passphrase=passphrase,
                kind=kind,
                expires_at=expires_at,
            ),
        )
        """The generated key pair"""

        self.public_key: pulumi.Output[str] = self.key_pair.public_key
        """The public key in armored form"""

        self.private_key: pulumi.Output[str] = pulumi.Output.secret(
            self.key_pair.private_key
        )
        """The passphrase-locked private key in armored form"""
