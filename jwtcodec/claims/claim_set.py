"""Registered and custom claim normalization."""

import math
import re
from collections.abc import Mapping
from datetime import UTC, date, datetime, time
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from jwtcodec.core.errors import InvalidClaim

AUDIENCE = "aud"
EXPIRATION_TIME = "exp"
ID = "jti"
ISSUED_AT = "iat"
ISSUER = "iss"
NOT_BEFORE = "nbf"
SUBJECT = "sub"

REGISTERED_CLAIMS = (
    AUDIENCE,
    EXPIRATION_TIME,
    ID,
    ISSUED_AT,
    ISSUER,
    NOT_BEFORE,
    SUBJECT,
)
TIMESTAMP_CLAIMS = (EXPIRATION_TIME, ISSUED_AT, NOT_BEFORE)

_DECIMAL = re.compile(r"[+-]?[0-9]+(\.[0-9]+)?", re.ASCII)


def to_timestamp(value: Any) -> int:
    """Normalize a date, datetime or number to integer Unix seconds."""
    if isinstance(value, bool):
        raise ValueError("a boolean is not a timestamp")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return int(value.timestamp())
    if isinstance(value, date):
        return int(datetime.combine(value, time.min, tzinfo=UTC).timestamp())
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("timestamp must be a finite number")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not _DECIMAL.fullmatch(text):
            raise ValueError(f"{value!r} is not a numeric timestamp")
        return int(float(text)) if "." in text else int(text)
    raise ValueError(f"{type(value).__name__} is not a timestamp")


class RegisteredClaims(BaseModel):
    """The seven registered claims, each optional."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    aud: StrictStr | list[StrictStr] | None = None
    exp: int | None = None
    jti: StrictStr | StrictInt | None = None
    iat: int | None = None
    iss: StrictStr | None = None
    nbf: int | None = None
    sub: StrictStr | StrictInt | None = None

    @field_validator(*TIMESTAMP_CLAIMS, mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int | None:
        if value is None:
            return None
        return to_timestamp(value)

    @field_validator(AUDIENCE, mode="after")
    @classmethod
    def _drop_empty_audience(cls, value: str | list[str] | None) -> str | list[str] | None:
        return value or None


class ClaimSet(BaseModel):
    """Immutable claim set: registered claims plus custom claims."""

    model_config = ConfigDict(frozen=True)

    registered: RegisteredClaims
    custom: dict[str, Any]

    def payload(self) -> dict[str, Any]:
        """Render the token payload, audience first."""
        registered = self.registered.model_dump(exclude_none=True)
        payload: dict[str, Any] = {}
        if AUDIENCE in registered:
            payload[AUDIENCE] = registered.pop(AUDIENCE)
        payload.update(registered)
        payload.update(self.custom)
        return payload


def build_claims(data: Mapping[str, Any]) -> ClaimSet:
    """Validate registered claims and keep the rest as custom claims.

    Raises:
        InvalidClaim: If a registered claim has a value of the wrong shape.
    """
    registered = {k: v for k, v in data.items() if k in REGISTERED_CLAIMS}
    custom = {k: v for k, v in data.items() if k not in REGISTERED_CLAIMS}
    try:
        claims = RegisteredClaims.model_validate(registered)
    except ValidationError as exc:
        error = exc.errors()[0]
        name = str(error["loc"][0]) if error["loc"] else "unknown"
        raise InvalidClaim(name, error["msg"]) from exc
    return ClaimSet(registered=claims, custom=custom)


def extract_claims(claims: ClaimSet) -> dict[str, Any]:
    """Flatten a claim set into a plain mapping."""
    return claims.payload()
