from flask import Blueprint, jsonify
from ..extensions import db
from ..models import Customer, Salon
from ..http import jerror
from ..auth import check_staff
from ..loyalty import level_info, next_level, thresholds_for
from ..services.accrual import visit_count
from ..utils.time import api_iso_z

bp = Blueprint("customers", __name__)

@bp.get("/<int:customer_id>/loyalty")
def loyalty(customer_id):
    if not check_staff():
        return jerror(401, "UNAUTHORIZED", "Missing or invalid bearer token.")

    customer = db.session.get(Customer, customer_id)
    if customer is None:
        return jerror(404, "CUSTOMER_NOT_FOUND", "Customer not found.")

    salon = db.session.get(Salon, customer.salon_id)
    visits = visit_count(db.session, customer.id)
    upcoming = next_level(customer.loyalty_level)

    return jsonify(
        customerId=customer.id,
        name=customer.full_name,
        visits=visits,
        lastVisitAt=api_iso_z(customer.last_visit_at),
        level=level_info(customer.loyalty_level, salon),
        nextLevel=level_info(upcoming, salon) if upcoming else None,
        visitsToNextLevel=max(thresholds_for(salon)[upcoming] - visits, 0) if upcoming else None,
        hasLoyaltyDiscount=customer.has_loyalty_discount,
        loyaltyDiscountUsedAt=api_iso_z(customer.loyalty_discount_used_at),
        referralCount=customer.referral_count,
        hasReferralDiscount=customer.has_referral_discount,
    )
