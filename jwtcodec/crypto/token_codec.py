"""Compact JWS token encoding and verified decoding."""

import json
import re
from collections.abc import Mapping
from typing import Any

from jwt.exceptions import PyJWTError
from jwt.utils import base64url_decode, base64url_encode

from jwtcodec.claims.claim_set import build_claims, extract_claims
from jwtcodec.core.errors import (
    DecodingError,
    EncodingError,
    InvalidClaim,
    InvalidSignature,
    TokenCodecError,
)
from jwtcodec.core.logging import get_logger
from jwtcodec.core.settings import CodecSettings
from jwtcodec.crypto.algorithms import Algorithm, resolve_algorithm
from jwtcodec.crypto.keys import load_key_material, signing_key, verification_key
from jwtcodec.crypto.types import KeyMaterial, ParsedToken, ResolvedKey

TOKEN_TYPE = "JWT"
SEGMENT_COUNT = 3

_BASE64URL = re.compile(r"[A-Za-z0-9_-]*")

logger = get_logger(__name__)


def _json_segment(data: Mapping[str, Any]) -> bytes:
    raw = json.dumps(data, separators=(",", ":"), allow_nan=False)
    return base64url_encode(raw.encode())


def _decode_segment(segment: str, part: str) -> bytes:
    if not _BASE64URL.fullmatch(segment):
        raise DecodingError(f"Could not decode token: {part} is not base64url")
    try:
        return base64url_decode(segment)
    except ValueError as exc:
        raise DecodingError(f"Could not decode token: invalid {part} padding") from exc


def _decode_json_segment(segment: str, part: str) -> dict[str, Any]:
    raw = _decode_segment(segment, part)
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise DecodingError(f"Could not decode token: {part} is not valid JSON") from exc
    if not isinstance(data, dict):
        raise DecodingError(f"Could not decode token: {part} must be a JSON object")
    return data


def parse_token(token: str) -> ParsedToken:
    """Split a compact token into header, claims and signature.

    Nothing returned here is verified; callers must not trust the claims.

    Raises:
        DecodingError: If the token is structurally malformed.
    """
    if not isinstance(token, str):
        raise DecodingError("Could not decode token: token must be a string")
    segments = token.split(".")
    if len(segments) != SEGMENT_COUNT:
        raise DecodingError(
            f"Could not decode token: expected {SEGMENT_COUNT} segments, "
            f"got {len(segments)}"
        )
    header_segment, payload_segment, signature_segment = segments
    header = _decode_json_segment(header_segment, "header")
    claims = _decode_json_segment(payload_segment, "payload")
    signature = _decode_segment(signature_segment, "signature")
    if not isinstance(header.get("alg"), str):
        raise DecodingError("Could not decode token: header has no algorithm")
    return ParsedToken(
        header=header,
        claims=claims,
        signature=signature,
        signing_input=f"{header_segment}.{payload_segment}".encode(),
        signature_segment=signature_segment,
    )


def _verify(parsed: ParsedToken, key: ResolvedKey) -> None:
    algorithm = key.algorithm
    if parsed.header["alg"] != algorithm.jws_name:
        raise InvalidSignature(
            f"Token algorithm {parsed.header['alg']} does not match "
            f"{algorithm.jws_name}"
        )
    if base64url_encode(parsed.signature).decode() != parsed.signature_segment:
        raise InvalidSignature("Token signature is not canonically encoded.")
    if not algorithm.signer().verify(parsed.signing_input, key.key, parsed.signature):
        raise InvalidSignature("Token Signature could not be verified.")


def encode(
    claims: Mapping[str, Any],
    algorithm: Algorithm | str,
    material: KeyMaterial,
    *,
    mirror_claims_in_header: bool = False,
) -> str:
    """Build and sign a compact token from ``claims``.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is an unknown name.
        EncodingError: On any key, claim, serialization or signing failure.
    """
    alg = resolve_algorithm(algorithm)
    try:
        key = signing_key(alg, material)
        payload = build_claims(claims).payload()
        header: dict[str, Any] = {"alg": alg.jws_name, "typ": TOKEN_TYPE}
        if mirror_claims_in_header:
            header.update((k, v) for k, v in payload.items() if k not in header)
        signing_input = b".".join([_json_segment(header), _json_segment(payload)])
        signature = alg.signer().sign(signing_input, key.key)
    except (
        TokenCodecError,
        PyJWTError,
        TypeError,
        ValueError,
        RecursionError,
    ) as exc:
        logger.info(
            "token_encode_failed",
            algorithm=alg.jws_name,
            reason=getattr(exc, "code", type(exc).__name__),
        )
        raise EncodingError(exc) from exc
    token = b".".join([signing_input, base64url_encode(signature)]).decode()
    logger.debug("token_encoded", algorithm=alg.jws_name)
    return token


def decode(
    token: str,
    algorithm: Algorithm | str,
    material: KeyMaterial,
) -> dict[str, Any]:
    """Verify ``token`` and return its claims.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is an unknown name.
        DecodingError: If the token is malformed.
        InvalidSignature: If the signature does not verify.
        MissingKeyMaterial: If no verification key is configured.
        InvalidKeyFormat: If the verification key cannot be loaded.
    """
    alg = resolve_algorithm(algorithm)
    try:
        parsed = parse_token(token)
    except DecodingError as exc:
        logger.info("token_malformed", algorithm=alg.jws_name, reason=exc.message)
        raise
    key = verification_key(alg, material)
    try:
        _verify(parsed, key)
    except InvalidSignature as exc:
        logger.warning(
            "token_signature_invalid", algorithm=alg.jws_name, reason=exc.message
        )
        raise
    try:
        claims = build_claims(parsed.claims)
    except InvalidClaim as exc:
        raise DecodingError(f"Could not decode token: {exc.message}") from exc
    logger.debug("token_decoded", algorithm=alg.jws_name)
    return extract_claims(claims)


class TokenCodec:
    """Encodes and decodes tokens for one algorithm and key material."""

    def __init__(
        self,
        algorithm: Algorithm | str,
        material: KeyMaterial,
        *,
        mirror_claims_in_header: bool = False,
    ) -> None:
        self._algorithm = resolve_algorithm(algorithm)
        self._material = material
        self._mirror_claims_in_header = mirror_claims_in_header

    @classmethod
    def from_settings(cls, settings: CodecSettings | None = None) -> "TokenCodec":
        """Create a codec from settings, loading key files once."""
        settings = settings or CodecSettings()
        algorithm = resolve_algorithm(settings.algorithm)
        return cls(
            algorithm,
            load_key_material(algorithm, settings),
            mirror_claims_in_header=settings.mirror_claims_in_header,
        )

    @property
    def algorithm(self) -> Algorithm:
        return self._algorithm

    @property
    def key_material(self) -> KeyMaterial:
        return self._material

    def with_key_material(self, material: KeyMaterial) -> "TokenCodec":
        """Return a new codec using ``material``; this codec is unchanged."""
        return TokenCodec(
            self._algorithm,
            material,
            mirror_claims_in_header=self._mirror_claims_in_header,
        )

    def encode(self, claims: Mapping[str, Any]) -> str:
        return encode(
            claims,
            self._algorithm,
            self._material,
            mirror_claims_in_header=self._mirror_claims_in_header,
        )

    def decode(self, token: str) -> dict[str, Any]:
        return decode(token, self._algorithm, self._material)
