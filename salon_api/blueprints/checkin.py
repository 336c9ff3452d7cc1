from flask import Blueprint, request, jsonify, current_app
from pydantic import ValidationError
from ..extensions import db
from ..errors import CheckinError, UnexpectedError
from ..http import jerror
from ..schemas import RedeemRequest
from ..services.checkin import redeem_visit_token

bp = Blueprint("checkin", __name__)

@bp.post("")
def redeem():
    payload = request.get_json(silent=True) or {}

    try:
        data = RedeemRequest.model_validate(payload)
    except ValidationError as e:
        return jerror(422, "VALIDATION_ERROR", "Invalid input.", details=e.errors(include_url=False))

    try:
        customer = redeem_visit_token(db.session, data.token, data.services)
    except CheckinError:
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Checkin API error")
        raise UnexpectedError(details=str(e)) from e

    return jsonify(success=True, customer=customer), 200
