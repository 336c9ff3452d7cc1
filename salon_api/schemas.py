import json
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field, field_validator


def parse_services(raw) -> list[str] | None:
    """
    Accepts a list of labels or a percent-encoded JSON array. A string that is
    not a JSON array becomes a one-element list holding the raw string.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        try:
            parsed = json.loads(unquote(raw))
        except ValueError:
            return [raw]
        if not isinstance(parsed, list):
            return [raw]
        raw = parsed
    if not isinstance(raw, (list, tuple)):
        return raw
    labels = [str(item) for item in raw]
    return labels or None


class RedeemRequest(BaseModel):
    token: str | None = None
    services: list[str] | None = None

    @field_validator("services", mode="before")
    @classmethod
    def normalize_services(cls, v):
        return parse_services(v)


class IssueTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: int = Field(..., alias="customerId", gt=0)
    issuer_id: int = Field(..., alias="issuerId", gt=0)
    services: list[str] | None = None

    @field_validator("services", mode="before")
    @classmethod
    def normalize_services(cls, v):
        return parse_services(v)
