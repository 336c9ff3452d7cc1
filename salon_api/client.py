import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone

import requests

from .utils.time import parse_iso

logger = logging.getLogger(__name__)

WAITING = "waiting"
EXPIRED = "expired"
CONFIRMED = "confirmed"

ERROR_MESSAGES = {
    "TOKEN_EXPIRED": "QR kodun süresi dolmuş. Lütfen yeni bir QR kod oluşturun.",
    "TOKEN_ALREADY_USED": "Bu QR kod zaten kullanılmış.",
    "INVALID_TOKEN": "Geçersiz veya süresi dolmuş QR kod.",
    "MISSING_TOKEN": "QR kod bulunamadı.",
    "CUSTOMER_NOT_FOUND": "Müşteri bulunamadı.",
    "VISIT_CREATION_FAILED": "Ziyaret kaydedilemedi.",
}
DEFAULT_ERROR_MESSAGE = "Bir hata oluştu"


def describe_error(code: str | None) -> str:
    return ERROR_MESSAGES.get(code or "", DEFAULT_ERROR_MESSAGE)


def can_regenerate(code: str | None) -> bool:
    return code == "TOKEN_EXPIRED"


class VisitTokenError(Exception):
    def __init__(self, status: int, code: str | None, message: str):
        super().__init__(message)
        self.status = status
        self.code = code


@dataclass
class IssuedVisit:
    token: str
    redemption_url: str
    qr_image_url: str
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class VisitTokenWatcher:
    def __init__(self, base_url: str, staff_token: str, session=None,
                 poll_interval: float = 2.0, tick_interval: float = 1.0,
                 grace_period: float = 2.0, timeout: float = 10,
                 clock=_utcnow, sleep=time.sleep):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {staff_token}"})
        self.poll_interval = poll_interval
        self.tick_interval = tick_interval
        self.grace_period = grace_period
        self.timeout = timeout
        self.clock = clock
        self.sleep = sleep

        self.current: IssuedVisit | None = None
        self.confirmed = False
        self._request = None

    def _raise_for(self, resp):
        if resp.status_code < 400:
            return
        try:
            body = resp.json()
        except ValueError:
            body = {}
        raise VisitTokenError(resp.status_code, body.get("code"), body.get("message", resp.reason or ""))

    def issue(self, customer_id: int, issuer_id: int, services: list[str] | None = None) -> IssuedVisit:
        payload = {"customerId": customer_id, "issuerId": issuer_id}
        if services:
            payload["services"] = services
        resp = self.session.post(f"{self.base_url}/api/visit-tokens", json=payload, timeout=self.timeout)
        self._raise_for(resp)
        body = resp.json()

        self._request = (customer_id, issuer_id, services)
        self.confirmed = False
        self.current = IssuedVisit(
            token=body["token"],
            redemption_url=body["redemptionUrl"],
            qr_image_url=body["qrImageUrl"],
            expires_at=parse_iso(body["expiresAt"]),
        )
        logger.info("Visit token issued for customer %s", customer_id)
        return self.current

    def regenerate(self) -> IssuedVisit:
        """Starts over with a brand-new token for the same customer and services."""
        if self._request is None:
            raise RuntimeError("No visit has been issued yet")
        return self.issue(*self._request)

    def remaining_seconds(self) -> int:
        if self.current is None:
            return 0
        delta = (self.current.expires_at - self.clock()).total_seconds()
        return max(0, math.floor(delta))

    def state(self) -> str:
        if self.confirmed:
            return CONFIRMED
        if self.current is None or self.clock() >= self.current.expires_at:
            return EXPIRED
        return WAITING

    def poll(self) -> str:
        """Asks the API whether the current token has been used."""
        if self.current is None:
            raise RuntimeError("No visit has been issued yet")
        resp = self.session.get(f"{self.base_url}/api/visit-tokens/{self.current.token}", timeout=self.timeout)
        self._raise_for(resp)
        if resp.json().get("usedAt"):
            self.confirmed = True
        return self.state()

    def watch(self, on_tick=None) -> str:
        """
        Blocks until the token is confirmed or expires and returns the final state.
        ``on_tick`` receives the remaining seconds once per tick. A confirmed
        visit is held for the grace period before returning. Expiry is only
        reported after one last poll finds the token unused.
        """
        since_poll = self.poll_interval
        while True:
            state = self.state()
            # a redemption can land between the last poll and expiry
            if self.current is not None and (state == EXPIRED or since_poll >= self.poll_interval):
                since_poll = 0
                try:
                    state = self.poll()
                except requests.RequestException as e:
                    logger.warning("Polling visit token failed: %s", e)
            if state == CONFIRMED:
                self.sleep(self.grace_period)
                return CONFIRMED
            if state == EXPIRED:
                return EXPIRED
            if on_tick is not None:
                on_tick(self.remaining_seconds())
            self.sleep(self.tick_interval)
            since_poll += self.tick_interval
