"""Shared test fixtures for jwtcodec."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from cryptography.x509.oid import NameOID

from jwtcodec.crypto.types import AsymmetricKeyMaterial, SymmetricKeyMaterial

KeyPair = tuple[bytes, bytes]


def pem_pair(private_key: PrivateKeyTypes, passphrase: bytes | None = None) -> KeyPair:
    """Serialize a private key and its public half to PEM."""
    encryption = (
        serialization.BestAvailableEncryption(passphrase)
        if passphrase
        else serialization.NoEncryption()
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption,
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


def generate_rsa() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host JWT_* variables out of settings under test."""
    for name in (
        "JWT_SECRET",
        "JWT_ALGORITHM",
        "JWT_KEYS",
        "JWT_KEYS_PRIVATE",
        "JWT_KEYS_PUBLIC",
        "JWT_KEYS_PASSPHRASE",
        "JWT_MIRROR_CLAIMS_IN_HEADER",
        "JWT_LOG_LEVEL",
        "JWT_LOG_JSON_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def rsa_pem() -> KeyPair:
    """A fresh RSA-2048 keypair as PEM."""
    return pem_pair(generate_rsa())


@pytest.fixture(scope="session")
def other_rsa_pem() -> KeyPair:
    """A second, unrelated RSA-2048 keypair."""
    return pem_pair(generate_rsa())


@pytest.fixture(scope="session")
def ec_pem() -> Callable[[int], KeyPair]:
    """Return an EC keypair on the curve matching a hash strength."""
    curves = {256: ec.SECP256R1(), 384: ec.SECP384R1(), 512: ec.SECP521R1()}
    pairs = {
        strength: pem_pair(ec.generate_private_key(curve))
        for strength, curve in curves.items()
    }
    return pairs.__getitem__


@pytest.fixture
def hmac_material() -> SymmetricKeyMaterial:
    return SymmetricKeyMaterial(secret=b"secret")


@pytest.fixture
def rsa_material(rsa_pem: KeyPair) -> AsymmetricKeyMaterial:
    private_pem, public_pem = rsa_pem
    return AsymmetricKeyMaterial(private_key_pem=private_pem, public_key_pem=public_pem)


PASSPHRASE = b"correct-horse"


@pytest.fixture(scope="session")
def encrypted_rsa_pem() -> KeyPair:
    """An RSA keypair whose private PEM is encrypted with ``PASSPHRASE``."""
    return pem_pair(generate_rsa(), passphrase=PASSPHRASE)


@pytest.fixture(scope="session")
def passphrase() -> bytes:
    return PASSPHRASE


@pytest.fixture(scope="session")
def rsa_certificate_pem() -> KeyPair:
    """A private key PEM and a self-signed certificate PEM for it."""
    key = generate_rsa()
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "jwtcodec-test")])
    now = datetime.now(UTC)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    private_pem, _ = pem_pair(key)
    return private_pem, certificate.public_bytes(serialization.Encoding.PEM)
