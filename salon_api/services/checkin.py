from datetime import datetime

from flask import current_app
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from ..errors import (
    CustomerNotFound,
    InvalidToken,
    MissingToken,
    TokenAlreadyUsed,
    TokenExpired,
    VisitCreationFailed,
)
from ..models import Customer, Visit, VisitToken
from ..utils.time import db_utc_naive, epoch_ms, to_utc, utcnow
from .accrual import apply_accrual, best_effort


def find_token(session, token_value: str) -> VisitToken | None:
    return session.execute(
        select(VisitToken)
        .options(joinedload(VisitToken.customer))
        .where(VisitToken.token == token_value)
    ).scalar_one_or_none()


def redeem_visit_token(session, token_value: str | None, services: list[str] | None = None,
                       now: datetime | None = None) -> dict:
    if not token_value:
        raise MissingToken()

    try:
        token = find_token(session, token_value)
    except SQLAlchemyError as e:
        session.rollback()
        current_app.logger.error("Token lookup error: %s", e)
        raise InvalidToken()
    if token is None:
        raise InvalidToken()

    now = to_utc(now or utcnow())
    current_app.logger.debug(
        "Token check: token=%s... remaining=%ss",
        token_value[:8], (epoch_ms(token.expires_at) - epoch_ms(now)) // 1000,
    )

    # expiry wins over used_at
    if epoch_ms(now) > epoch_ms(token.expires_at):
        raise TokenExpired()
    if token.used_at is not None:
        raise TokenAlreadyUsed()

    customer = token.customer
    if customer is None:
        current_app.logger.error("Customer not found for token %s...", token_value[:8])
        raise CustomerNotFound()

    token_id = token.id
    customer_id = customer.id
    customer_name = customer.full_name
    stamp = db_utc_naive(now)

    session.add(Visit(
        salon_id=token.salon_id,
        customer_id=customer_id,
        created_by=token.created_by,
        visited_at=stamp,
        services=services or None,
    ))
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        current_app.logger.error("Visit creation error for customer %s: %s", customer_id, e)
        raise VisitCreationFailed(details=str(e))

    best_effort(session, "mark token used", lambda: session.execute(
        update(VisitToken).where(VisitToken.id == token_id).values(used_at=stamp)
    ))
    best_effort(session, "customer last visit", lambda: session.execute(
        update(Customer).where(Customer.id == customer_id).values(last_visit_at=stamp)
    ))

    visits, level = apply_accrual(session, customer_id, now)
    current_app.logger.info(
        "Check-in confirmed for customer %s (visit #%s, level %s)",
        customer_id, visits, level.value if level else None,
    )

    return {"id": customer_id, "name": customer_name}
