"""Error kinds raised by the token codec."""


class TokenCodecError(Exception):
    """Base exception for token codec failures."""

    code = "token_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnsupportedAlgorithm(TokenCodecError):
    """The configured algorithm name is not one of the supported signers."""

    code = "unsupported_algorithm"

    def __init__(self, name: object) -> None:
        self.name = name
        super().__init__(f"The given algorithm could not be found: {name!r}")


class MissingKeyMaterial(TokenCodecError):
    """No secret or key content is configured for the operation."""

    code = "missing_key_material"


class InvalidKeyFormat(TokenCodecError):
    """Key bytes cannot be used as a key for the algorithm family."""

    code = "invalid_key_format"


class InvalidClaim(TokenCodecError):
    """A registered claim has a value of the wrong shape."""

    code = "invalid_claim"

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid value for claim [{name}]: {reason}")


class EncodingError(TokenCodecError):
    """Token could not be created; ``cause`` holds the underlying error."""

    code = "encoding_error"

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"Could not create token: {cause}")


class DecodingError(TokenCodecError):
    """Token is structurally malformed."""

    code = "decoding_error"


class InvalidSignature(TokenCodecError):
    """Token is well formed but its signature could not be verified."""

    code = "invalid_signature"
