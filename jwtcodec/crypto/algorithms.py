"""Registry of supported JWS signature algorithms."""

from enum import Enum, StrEnum

from cryptography.hazmat.primitives.asymmetric import ec
from jwt.algorithms import Algorithm as Signer
from jwt.algorithms import ECAlgorithm, HMACAlgorithm, RSAAlgorithm

from jwtcodec.core.errors import UnsupportedAlgorithm


class Family(StrEnum):
    """Signature algorithm family."""

    HMAC = "HMAC"
    RSA = "RSA"
    ECDSA = "ECDSA"

    @property
    def is_asymmetric(self) -> bool:
        return self is not Family.HMAC


_HMAC_HASHES = {
    256: HMACAlgorithm.SHA256,
    384: HMACAlgorithm.SHA384,
    512: HMACAlgorithm.SHA512,
}
_RSA_HASHES = {
    256: RSAAlgorithm.SHA256,
    384: RSAAlgorithm.SHA384,
    512: RSAAlgorithm.SHA512,
}
_EC_HASHES = {
    256: ECAlgorithm.SHA256,
    384: ECAlgorithm.SHA384,
    512: ECAlgorithm.SHA512,
}
_EC_CURVES: dict[int, type[ec.EllipticCurve]] = {
    256: ec.SECP256R1,
    384: ec.SECP384R1,
    512: ec.SECP521R1,
}


class Algorithm(Enum):
    """A supported algorithm: its JWS name, family and hash strength."""

    HS256 = ("HS256", Family.HMAC, 256)
    HS384 = ("HS384", Family.HMAC, 384)
    HS512 = ("HS512", Family.HMAC, 512)
    RS256 = ("RS256", Family.RSA, 256)
    RS384 = ("RS384", Family.RSA, 384)
    RS512 = ("RS512", Family.RSA, 512)
    ES256 = ("ES256", Family.ECDSA, 256)
    ES384 = ("ES384", Family.ECDSA, 384)
    ES512 = ("ES512", Family.ECDSA, 512)

    def __init__(self, jws_name: str, family: Family, strength: int) -> None:
        self.jws_name = jws_name
        self.family = family
        self.strength = strength

    @property
    def is_asymmetric(self) -> bool:
        return self.family.is_asymmetric

    @property
    def curve(self) -> type[ec.EllipticCurve] | None:
        """Elliptic curve an ECDSA key must be on, None for other families."""
        if self.family is Family.ECDSA:
            return _EC_CURVES[self.strength]
        return None

    def signer(self) -> Signer:
        """Build the PyJWT primitive that signs and verifies for this algorithm."""
        match self.family:
            case Family.HMAC:
                return HMACAlgorithm(_HMAC_HASHES[self.strength])
            case Family.RSA:
                return RSAAlgorithm(_RSA_HASHES[self.strength])
            case Family.ECDSA:
                return ECAlgorithm(_EC_HASHES[self.strength])


_BY_NAME = {alg.jws_name: alg for alg in Algorithm}

SUPPORTED_ALGORITHMS = tuple(_BY_NAME)


def resolve_algorithm(name: object) -> Algorithm:
    """Resolve an exact, case-sensitive algorithm name.

    Raises:
        UnsupportedAlgorithm: If ``name`` is not a supported algorithm.
    """
    if isinstance(name, Algorithm):
        return name
    if not isinstance(name, str) or name not in _BY_NAME:
        raise UnsupportedAlgorithm(name)
    return _BY_NAME[name]
