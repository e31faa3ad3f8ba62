"""Signing and verification key resolution."""

from pathlib import Path

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm as UnsupportedKeyAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.types import (
    PrivateKeyTypes,
    PublicKeyTypes,
)
from jwt.exceptions import InvalidKeyError

from jwtcodec.core.errors import InvalidKeyFormat, MissingKeyMaterial
from jwtcodec.core.settings import CodecSettings
from jwtcodec.crypto.algorithms import Algorithm, Family
from jwtcodec.crypto.types import (
    AsymmetricKeyMaterial,
    KeyMaterial,
    ResolvedKey,
    SymmetricKeyMaterial,
)

PEM_PREFIX = "-----BEGIN"
FILE_URI_PREFIX = "file://"
CERTIFICATE_PREFIX = b"-----BEGIN CERTIFICATE-----"


def signing_key(algorithm: Algorithm, material: KeyMaterial) -> ResolvedKey:
    """Resolve the key that signs tokens for ``algorithm``."""
    if algorithm.is_asymmetric:
        asymmetric = _require_asymmetric(algorithm, material)
        key = _load_private_key(algorithm, asymmetric)
    else:
        key = _secret(algorithm, material)
    return ResolvedKey(algorithm=algorithm, purpose="sign", key=key)


def verification_key(algorithm: Algorithm, material: KeyMaterial) -> ResolvedKey:
    """Resolve the key that verifies token signatures for ``algorithm``."""
    if algorithm.is_asymmetric:
        asymmetric = _require_asymmetric(algorithm, material)
        key = _load_public_key(algorithm, asymmetric)
    else:
        key = _secret(algorithm, material)
    return ResolvedKey(algorithm=algorithm, purpose="verify", key=key)


def _secret(algorithm: Algorithm, material: KeyMaterial) -> bytes:
    if not isinstance(material, SymmetricKeyMaterial):
        raise MissingKeyMaterial(
            f"{algorithm.jws_name} requires a secret, asymmetric keys were given"
        )
    if not material.secret:
        raise MissingKeyMaterial("Secret is not set")
    try:
        return algorithm.signer().prepare_key(material.secret)
    except InvalidKeyError as exc:
        raise InvalidKeyFormat(str(exc)) from exc


def _require_asymmetric(
    algorithm: Algorithm, material: KeyMaterial
) -> AsymmetricKeyMaterial:
    if not isinstance(material, AsymmetricKeyMaterial):
        raise MissingKeyMaterial(
            f"{algorithm.jws_name} requires a key pair, a secret was given"
        )
    return material


def _load_private_key(
    algorithm: Algorithm, material: AsymmetricKeyMaterial
) -> PrivateKeyTypes:
    if not material.private_key_pem:
        raise MissingKeyMaterial("Private key is not set")
    try:
        key = _deserialize_private_key(
            material.private_key_pem, material.passphrase or None
        )
    except (ValueError, TypeError, UnsupportedKeyAlgorithm) as exc:
        raise InvalidKeyFormat(f"Could not load private key: {exc}") from exc
    if algorithm.family is Family.RSA and not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidKeyFormat(f"{algorithm.jws_name} requires an RSA private key")
    if algorithm.family is Family.ECDSA:
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise InvalidKeyFormat(f"{algorithm.jws_name} requires an EC private key")
        _check_curve(algorithm, key.curve)
    return key


def _deserialize_private_key(pem: bytes, passphrase: bytes | None) -> PrivateKeyTypes:
    try:
        return serialization.load_pem_private_key(pem, password=passphrase)
    except TypeError:
        # a passphrase configured for an unencrypted key is ignored
        if passphrase is None:
            raise
        return serialization.load_pem_private_key(pem, password=None)


def _load_public_key(
    algorithm: Algorithm, material: AsymmetricKeyMaterial
) -> PublicKeyTypes:
    if not material.public_key_pem:
        raise MissingKeyMaterial("Public key is not set")
    pem = material.public_key_pem
    try:
        if pem.lstrip().startswith(CERTIFICATE_PREFIX):
            key = x509.load_pem_x509_certificate(pem).public_key()
        else:
            key = serialization.load_pem_public_key(pem)
    except (ValueError, UnsupportedKeyAlgorithm) as exc:
        raise InvalidKeyFormat(f"Could not load public key: {exc}") from exc
    if algorithm.family is Family.RSA and not isinstance(key, rsa.RSAPublicKey):
        raise InvalidKeyFormat(f"{algorithm.jws_name} requires an RSA public key")
    if algorithm.family is Family.ECDSA:
        if not isinstance(key, ec.EllipticCurvePublicKey):
            raise InvalidKeyFormat(f"{algorithm.jws_name} requires an EC public key")
        _check_curve(algorithm, key.curve)
    return key


def _check_curve(algorithm: Algorithm, curve: ec.EllipticCurve) -> None:
    expected = algorithm.curve
    if expected is not None and curve.name != expected.name:
        raise InvalidKeyFormat(
            f"{algorithm.jws_name} requires a {expected.name} key, got {curve.name}"
        )


def read_key_source(source: str | None) -> bytes | None:
    """Read key content from inline PEM text, a file:// URI or a path."""
    if not source:
        return None
    if source.lstrip().startswith(PEM_PREFIX):
        return source.encode()
    path = Path(source.removeprefix(FILE_URI_PREFIX))
    if not path.is_file():
        raise MissingKeyMaterial(f"Key file not found: {path}")
    return path.read_bytes()


def load_key_material(algorithm: Algorithm, settings: CodecSettings) -> KeyMaterial:
    """Build key material for ``algorithm`` from settings, reading key files once."""
    if not algorithm.is_asymmetric:
        secret = settings.secret.encode() if settings.secret else None
        return SymmetricKeyMaterial(secret=secret)
    keys = settings.keys
    return AsymmetricKeyMaterial(
        private_key_pem=read_key_source(keys.private),
        public_key_pem=read_key_source(keys.public),
        passphrase=keys.passphrase.encode() if keys.passphrase else None,
    )
