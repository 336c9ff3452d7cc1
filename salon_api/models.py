
from sqlalchemy import func
from .extensions import db
from .loyalty import LoyaltyLevel

class Salon(db.Model):
    __tablename__ = "salons"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)

    loyalty_silver_min_visits = db.Column(db.Integer)
    loyalty_gold_min_visits = db.Column(db.Integer)
    loyalty_platinum_min_visits = db.Column(db.Integer)
    loyalty_vip_min_visits = db.Column(db.Integer)

    loyalty_bronze_discount = db.Column(db.Integer)
    loyalty_silver_discount = db.Column(db.Integer)
    loyalty_gold_discount = db.Column(db.Integer)
    loyalty_platinum_discount = db.Column(db.Integer)
    loyalty_vip_discount = db.Column(db.Integer)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    customers = db.relationship("Customer", back_populates="salon", cascade="all, delete-orphan")
    staff = db.relationship("Staff", back_populates="salon", cascade="all, delete-orphan")

class Staff(db.Model):
    __tablename__ = "staff"
    id = db.Column(db.Integer, primary_key=True)
    salon_id = db.Column(db.Integer, db.ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    salon = db.relationship("Salon", back_populates="staff")

class Customer(db.Model):
    __tablename__ = "customers"
    id = db.Column(db.Integer, primary_key=True)
    salon_id = db.Column(db.Integer, db.ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(32))
    last_visit_at = db.Column(db.DateTime(timezone=True))

    loyalty_level = db.Column(
        db.Enum(LoyaltyLevel, name="loyalty_level"), nullable=False, default=LoyaltyLevel.BRONZE
    )
    has_loyalty_discount = db.Column(db.Boolean, nullable=False, default=False)
    loyalty_discount_used_at = db.Column(db.DateTime(timezone=True))

    referred_by = db.Column(db.Integer, db.ForeignKey("customers.id", ondelete="SET NULL"), index=True)
    referral_count = db.Column(db.Integer, nullable=False, default=0)
    has_referral_discount = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    salon = db.relationship("Salon", back_populates="customers")
    visits = db.relationship("Visit", back_populates="customer", cascade="all, delete-orphan")

class VisitToken(db.Model):
    __tablename__ = "visit_tokens"
    id = db.Column(db.Integer, primary_key=True)
    salon_id = db.Column(db.Integer, db.ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("staff.id", ondelete="SET NULL"))
    token = db.Column(db.String(64), nullable=False, unique=True, index=True)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    used_at = db.Column(db.DateTime(timezone=True))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    customer = db.relationship("Customer")

class Visit(db.Model):
    __tablename__ = "visits"
    id = db.Column(db.Integer, primary_key=True)
    salon_id = db.Column(db.Integer, db.ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("staff.id", ondelete="SET NULL"))
    visited_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    services = db.Column(db.JSON)

    customer = db.relationship("Customer", back_populates="visits")

class ReferralReward(db.Model):
    __tablename__ = "referral_rewards"
    id = db.Column(db.Integer, primary_key=True)
    salon_id = db.Column(db.Integer, db.ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    referrer_id = db.Column(db.Integer, db.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    referred_id = db.Column(db.Integer, db.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
