import json
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from urllib.parse import quote, urlencode

from flask import current_app

from ..models import VisitToken
from ..utils.time import db_utc_naive, to_utc, truncate_ms, utcnow


@dataclass(frozen=True)
class IssuedToken:
    token: str
    redemption_url: str
    expires_at: datetime


def build_redemption_url(base_url: str, token: str, services: list[str] | None = None) -> str:
    url = f"{base_url.rstrip('/')}/checkin?token={quote(token, safe='')}"
    if services:
        url += "&services=" + quote(json.dumps(services, ensure_ascii=False, separators=(",", ":")), safe="")
    return url


def qr_image_url(redemption_url: str) -> str:
    """URL of the external generator that renders the redemption URL as a QR image."""
    endpoint = current_app.config["QR_IMAGE_ENDPOINT"]
    size = current_app.config["QR_IMAGE_SIZE"]
    return f"{endpoint}?{urlencode({'size': size, 'data': redemption_url})}"


def issue_visit_token(session, salon_id: int, customer_id: int, issuer_id: int,
                      services: list[str] | None = None, now: datetime | None = None) -> IssuedToken:
    """
    Inserts a fresh single-use token for a customer and returns its redemption URL.
    Store errors propagate to the caller.
    """
    now = to_utc(now or utcnow())
    expires_at = truncate_ms(now + timedelta(seconds=current_app.config["VISIT_TOKEN_TTL_SECONDS"]))
    value = secrets.token_urlsafe(24)

    session.add(VisitToken(
        salon_id=salon_id,
        customer_id=customer_id,
        created_by=issuer_id,
        token=value,
        expires_at=db_utc_naive(expires_at),
        used_at=None,
    ))
    session.commit()

    current_app.logger.info("Issued visit token for customer %s (expires %s)", customer_id, expires_at.isoformat())
    url = build_redemption_url(current_app.config["CHECKIN_BASE_URL"], value, services)
    return IssuedToken(token=value, redemption_url=url, expires_at=expires_at)


def token_state(token: VisitToken, now: datetime | None = None) -> str:
    """Staff-side view of a token: confirmed once used, expired once the window closes."""
    if token.used_at is not None:
        return "confirmed"
    if to_utc(now or utcnow()) >= to_utc(token.expires_at):
        return "expired"
    return "waiting"
