from datetime import datetime

from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from ..loyalty import resolve_level, thresholds_for
from ..models import Customer, ReferralReward, Salon, Visit
from ..utils.time import db_utc_naive, utcnow


def best_effort(session, label: str, step):
    """Runs ``step`` and commits; on a store error rolls back, logs and returns None."""
    try:
        result = step()
        session.commit()
        return result
    except SQLAlchemyError:
        session.rollback()
        current_app.logger.exception("Check-in bookkeeping step failed: %s", label)
        return None


def visit_count(session, customer_id: int) -> int:
    return session.execute(
        select(func.count()).select_from(Visit).where(Visit.customer_id == customer_id)
    ).scalar_one()


def _update_loyalty_level(session, customer: Customer, visits: int):
    salon = session.get(Salon, customer.salon_id)
    new_level = resolve_level(visits, thresholds_for(salon))
    if customer.loyalty_level != new_level:
        current_app.logger.info(
            "Customer %s moves from %s to %s after %d visits",
            customer.id, getattr(customer.loyalty_level, "value", None), new_level.value, visits,
        )
        customer.loyalty_level = new_level
        # cleared elsewhere once the discount is redeemed
        customer.has_loyalty_discount = True
    return new_level


def _reward_referrer(session, referrer: Customer):
    referrer.referral_count = (referrer.referral_count or 0) + 1
    referrer.has_referral_discount = True


def _reward_referred(session, customer: Customer):
    customer.has_referral_discount = True


def _record_referral(session, customer: Customer, referrer_id: int, now: datetime):
    session.add(ReferralReward(
        salon_id=customer.salon_id,
        referrer_id=referrer_id,
        referred_id=customer.id,
        created_at=db_utc_naive(now),
    ))


def apply_referral(session, customer: Customer, now: datetime | None = None):
    referrer_id = customer.referred_by
    if referrer_id is None:
        return
    referrer = session.get(Customer, referrer_id)
    if referrer is None:
        current_app.logger.warning("Referrer %s of customer %s not found", referrer_id, customer.id)
        return

    now = now or utcnow()
    best_effort(session, "referrer reward", lambda: _reward_referrer(session, referrer))
    best_effort(session, "referred customer reward", lambda: _reward_referred(session, customer))
    best_effort(session, "referral reward record", lambda: _record_referral(session, customer, referrer_id, now))
    current_app.logger.info("Referral reward granted: %s referred %s", referrer_id, customer.id)


def apply_accrual(session, customer_id: int, now: datetime | None = None):
    """Returns (visit count, resolved level); either is None when it could not be determined."""
    try:
        visits = visit_count(session, customer_id)
        customer = session.get(Customer, customer_id)
    except SQLAlchemyError:
        session.rollback()
        current_app.logger.exception("Could not load visit count for customer %s", customer_id)
        return None, None
    if customer is None:
        current_app.logger.warning("Customer %s vanished before accrual", customer_id)
        return visits, None

    level = best_effort(session, "loyalty level", lambda: _update_loyalty_level(session, customer, visits))

    if visits == 1:
        apply_referral(session, customer, now)

    return visits, level
