"""Type definitions for key material, resolved keys and parsed tokens."""

from typing import Annotated, Any, Literal

from cryptography.hazmat.primitives.asymmetric.types import (
    PrivateKeyTypes,
    PublicKeyTypes,
)
from pydantic import BaseModel, ConfigDict, Field

from jwtcodec.crypto.algorithms import Algorithm


class SymmetricKeyMaterial(BaseModel):
    """Shared secret for HMAC algorithms."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["symmetric"] = "symmetric"
    secret: bytes | None = None


class AsymmetricKeyMaterial(BaseModel):
    """PEM encoded key pair for RSA and ECDSA algorithms."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["asymmetric"] = "asymmetric"
    private_key_pem: bytes | None = None
    public_key_pem: bytes | None = None
    passphrase: bytes | None = None


KeyMaterial = Annotated[
    SymmetricKeyMaterial | AsymmetricKeyMaterial,
    Field(discriminator="kind"),
]


class ResolvedKey(BaseModel):
    """Concrete key handle for one sign or verify operation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    algorithm: Algorithm
    purpose: Literal["sign", "verify"]
    key: bytes | PrivateKeyTypes | PublicKeyTypes


class ParsedToken(BaseModel):
    """A compact token split into its parts, not yet verified."""

    model_config = ConfigDict(frozen=True)

    header: dict[str, Any]
    claims: dict[str, Any]
    signature: bytes
    signing_input: bytes
    signature_segment: str
