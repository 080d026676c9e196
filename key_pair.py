"""Provides the KeyPair dynamic resource which generates a PGP key pair
whose private key is locked with a passphrase. The key is generated exactly
once, when the resource is created; after that the resource only carries
the generated key around in the stack state.
"""
import traceback
import pulumi
from pulumi.runtime import rpc
from typing import Any, Dict, List, Optional, Tuple, TypedDict
import secrets
import keygen
from key_profiles import DEFAULT_KIND, KINDS
from keygen_errors import InvalidExpirationError


class KeyPairIdentity(TypedDict):
    """The single user id on the key"""

    name: str
    """Real name"""

    email: str
    """Email address"""


class KeyPairInputs:
    """The inputs that define a key pair."""

    identity: pulumi.Input[Dict[str, str]]
    """The user id of the key, with the keys `name` and `email`. Changing
    either forces a new key to be generated.
    """

    passphrase: pulumi.Input[str]
    """The passphrase which locks the private key. Changing it forces a new
    key to be generated.
    """

    kind: pulumi.Input[Optional[str]]
    """Which kind of key to use - `default` results in a curve25519 key,
    `rfc4880` results in a rsa 4096 bits key and `rfc9580` results in a
    NIST P-521 key. Changing it forces a new key to be generated.
    """

    expires_at: pulumi.Input[Optional[str]]
    """When the key should expire, as an RFC3339 timestamp. If not set, the
    key does not expire.
    """

    def __init__(
        self,
        identity_name: pulumi.Input[str],
        identity_email: pulumi.Input[str],
        passphrase: pulumi.Input[str],
        kind: pulumi.Input[Optional[str]] = None,
        expires_at: pulumi.Input[Optional[str]] = None,
    ):
        self.identity = {"name": identity_name, "email": identity_email}
        self.passphrase = passphrase
        self.kind = kind
        self.expires_at = expires_at


class _KeyPairInputs(TypedDict):
    identity: KeyPairIdentity
    passphrase: str
    kind: str
    expires_at: Optional[str]


class _KeyPairOutputs(TypedDict):
    """The outputs of a key pair."""

    key_id: str
    """The hex key id of the key, which is also the resource id"""

    fingerprint: str
    """The hex fingerprint of the key"""

    private_key: str
    """The passphrase-locked private key in armored form"""

    public_key: str
    """The public key in armored form"""

    identity: KeyPairIdentity
    """The user id the key was generated with"""

    passphrase: str
    """The passphrase the private key is locked with"""

    kind: str
    """The kind of key that was generated"""

    expires_at: Optional[str]
    """When the key expires, if it does"""


REPLACE = "replace"
"""The field identifies the key: any change generates a new key"""

IN_PLACE = "in-place"
"""The field is recorded in state but changing it does not touch the key"""

FIELD_POLICIES: Dict[Tuple[str, ...], str] = {
    ("kind",): REPLACE,
    ("passphrase",): REPLACE,
    ("identity", "name"): REPLACE,
    ("identity", "email"): REPLACE,
    # the key was generated with the old expiration, so arguably this should
    # be REPLACE as well; it is kept in-place until that is decided
    ("expires_at",): IN_PLACE,
}
"""How a change to each input field is handled. Fields are addressed by
their path within the inputs.
"""

DERIVED_FIELDS = ("key_id", "fingerprint", "private_key", "public_key")
"""Output-only fields; they are produced by generation and never diffed"""

SECRET_FIELDS = ("passphrase", "private_key")
"""Fields which must never be logged or written out in plain text"""


def get_field(props: Dict[str, Any], path: Tuple[str, ...]) -> Any:
    """Returns the value at the given path within the props, or None if any
    part of the path is missing
    """
    value: Any = props
    for part in path:
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def redact(props: Dict[str, Any]) -> Dict[str, Any]:
    """Returns a shallow copy of the props with the secret fields hidden"""
    return {
        k: ("[secret]" if k in SECRET_FIELDS and v is not None else v)
        for k, v in props.items()
    }


class KeyPairProvider(pulumi.dynamic.ResourceProvider):
    """Generates a PGP key pair when created. Reading, updating, and
    deleting intentionally do nothing: there is no external key store to
    compare against, every field that would change the key forces a
    replacement instead, and discarding the key requires no revocation.
    """

    def check(
        self, _olds: Dict[str, Any], news: Dict[str, Any]
    ) -> pulumi.dynamic.CheckResult:
        inputs = dict(news)
        if inputs.get("kind") is None:
            inputs["kind"] = DEFAULT_KIND

        failures: List[pulumi.dynamic.CheckFailure] = []

        if not inputs.get("passphrase"):
            failures.append(
                pulumi.dynamic.CheckFailure("passphrase", "passphrase is required")
            )

        for part in ("name", "email"):
            if not get_field(inputs, ("identity", part)):
                failures.append(
                    pulumi.dynamic.CheckFailure(
                        f"identity.{part}", f"identity {part} is required"
                    )
                )

        if inputs["kind"] != rpc.UNKNOWN and inputs["kind"] not in KINDS:
            failures.append(
                pulumi.dynamic.CheckFailure(
                    "kind",
                    f"{inputs['kind']!r} must be one of {', '.join(KINDS)}",
                )
            )

        # unknown during preview when it comes from another resource
        if inputs.get("expires_at") not in (None, rpc.UNKNOWN):
            try:
                keygen.parse_expiration(inputs["expires_at"])
            except InvalidExpirationError as e:
                failures.append(pulumi.dynamic.CheckFailure("expires_at", str(e)))

        return pulumi.dynamic.CheckResult(inputs=inputs, failures=failures)

    def create(self, inputs: _KeyPairInputs) -> pulumi.dynamic.CreateResult:
        request = keygen.KeyPairRequest(
            identity_name=inputs["identity"]["name"],
            identity_email=inputs["identity"]["email"],
            passphrase=inputs["passphrase"],
            kind=inputs.get("kind") or DEFAULT_KIND,
            expires_at=inputs.get("expires_at"),
        )
        try:
            result = keygen.generate(request)
        except Exception as e:
            pulumi.log.error(f"failed to generate {request.kind} key pair: {e}")
            with open(f"key_pair_error_{secrets.token_hex(8)}.txt", "a") as f_out:
                print(f"inputs={redact(dict(inputs))}", file=f_out)
                traceback.print_exc(file=f_out)
            raise

        pulumi.log.info(
            f"generated {request.kind} key pair {result.id} ({result.fingerprint})"
        )
        return pulumi.dynamic.CreateResult(
            id_=result.id,
            outs=_KeyPairOutputs(
                key_id=result.id,
                fingerprint=result.fingerprint,
                private_key=result.private_key,
                public_key=result.public_key,
                identity=KeyPairIdentity(
                    name=request.identity_name, email=request.identity_email
                ),
                passphrase=request.passphrase,
                kind=request.kind,
                expires_at=request.expires_at,
            ),
        )

    def read(self, id_: str, props: _KeyPairOutputs) -> pulumi.dynamic.ReadResult:
        # Nothing to refresh against; the state is the source of truth.
        return pulumi.dynamic.ReadResult(id_=id_, outs=props)

    def diff(
        self, _id: str, olds: _KeyPairOutputs, news: _KeyPairInputs
    ) -> pulumi.dynamic.DiffResult:
        replaces: List[str] = []
        changed = False
        for path, policy in FIELD_POLICIES.items():
            if get_field(olds, path) == get_field(news, path):
                continue

            changed = True
            if policy == REPLACE and path[0] not in replaces:
                replaces.append(path[0])

        if not changed:
            return pulumi.dynamic.DiffResult(changes=False)

        return pulumi.dynamic.DiffResult(
            changes=True,
            replaces=replaces,
            stables=list(DERIVED_FIELDS) if not replaces else [],
            delete_before_replace=bool(replaces),
        )

    def update(
        self, _id: str, olds: _KeyPairOutputs, news: _KeyPairInputs
    ) -> pulumi.dynamic.UpdateResult:
        # The key itself is never touched; only the recorded in-place fields
        # follow the new inputs.
        outs = dict(olds)
        for path, policy in FIELD_POLICIES.items():
            if policy == IN_PLACE:
                outs[path[0]] = news.get(path[0])
        return pulumi.dynamic.UpdateResult(outs=outs)

    def delete(self, _id: str, _props: _KeyPairOutputs) -> None:
        # Nothing to do here; the key is forgotten along with the state.
        return None


class KeyPair(pulumi.dynamic.Resource):
    """A PGP key pair, generated when the resource is created. The private
    key is locked with the passphrase. Changing the kind, passphrase or
    identity destroys the key pair and generates a new one.
    """

    key_id: pulumi.Output[str]
    """The hex key id of the key"""

    fingerprint: pulumi.Output[str]
    """The hex fingerprint of the key"""

    private_key: pulumi.Output[str]
    """The passphrase-locked private key in armored form. Secret."""

    public_key: pulumi.Output[str]
    """The public key in armored form"""

    kind: pulumi.Output[str]
    """The kind of key which was generated"""

    expires_at: pulumi.Output[Optional[str]]
    """When the key expires, if it does"""

    def __init__(
        self,
        name: str,
        props: KeyPairInputs,
        opts: Optional[pulumi.ResourceOptions] = None,
    ):
        super().__init__(
            KeyPairProvider(),
            name,
            {
                "key_id": None,
                "fingerprint": None,
                "private_key": None,
                "public_key": None,
                **vars(props),
            },
            pulumi.ResourceOptions.merge(
                opts,
                pulumi.ResourceOptions(additional_secret_outputs=list(SECRET_FIELDS)),
            ),
        )
