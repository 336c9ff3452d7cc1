from flask import Blueprint, request, jsonify, current_app
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from ..extensions import db
from ..models import Customer, Staff, VisitToken
from ..http import jerror
from ..auth import check_staff
from ..schemas import IssueTokenRequest
from ..services.tokens import issue_visit_token, qr_image_url, token_state
from ..utils.time import api_iso_ms

bp = Blueprint("visit_tokens", __name__)

@bp.before_request
def require_staff():
    if not check_staff():
        return jerror(401, "UNAUTHORIZED", "Missing or invalid bearer token.")

@bp.post("")
def issue():
    payload = request.get_json(silent=True)
    if not payload:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = IssueTokenRequest.model_validate(payload)
    except ValidationError as e:
        return jerror(422, "VALIDATION_ERROR", "Invalid input.", details=e.errors(include_url=False))

    customer = db.session.get(Customer, data.customer_id)
    if customer is None:
        return jerror(404, "CUSTOMER_NOT_FOUND", "Customer not found.")
    issuer = db.session.get(Staff, data.issuer_id)
    if issuer is None or issuer.salon_id != customer.salon_id:
        return jerror(404, "STAFF_NOT_FOUND", "Staff member not found in this salon.")

    try:
        issued = issue_visit_token(db.session, customer.salon_id, customer.id, issuer.id, data.services)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error("Visit token insert failed for customer %s: %s", data.customer_id, e)
        return jerror(500, "UNEXPECTED_ERROR", "Could not start visit.", str(e))

    return jsonify(
        token=issued.token,
        redemptionUrl=issued.redemption_url,
        qrImageUrl=qr_image_url(issued.redemption_url),
        expiresAt=api_iso_ms(issued.expires_at),
    ), 201

@bp.get("/<token>")
def status(token):
    """Polled by the issuing staff device until the token is used or expires."""
    row = VisitToken.query.filter_by(token=token).one_or_none()
    if row is None:
        return jerror(404, "INVALID_TOKEN", "Invalid token.")

    return jsonify(
        token=row.token,
        expiresAt=api_iso_ms(row.expires_at),
        usedAt=api_iso_ms(row.used_at),
        state=token_state(row),
    )
