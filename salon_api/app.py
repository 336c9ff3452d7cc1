import click
from flask import Flask, jsonify
from flask.cli import with_appcontext
from flask_cors import CORS
from .extensions import db, migrate
from .config import Config
from .errors import CheckinError
from .http import jerror
from .blueprints.checkin import bp as checkin_bp
from .blueprints.visit_tokens import bp as visit_tokens_bp
from .blueprints.customers import bp as customers_bp
from .models import Customer, ReferralReward, Salon, Staff, Visit, VisitToken

def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    CORS(app)

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(checkin_bp, url_prefix="/api/checkin")
    app.register_blueprint(visit_tokens_bp, url_prefix="/api/visit-tokens")
    app.register_blueprint(customers_bp, url_prefix="/api/customers")

    @app.errorhandler(CheckinError)
    def handle_checkin_error(err):
        return jerror(err.status, err.code, err.message, err.details)

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    @click.command("seed")
    @with_appcontext
    def seed_command():
        """Creates a demo salon with staff and customers."""
        for model in (ReferralReward, Visit, VisitToken, Customer, Staff, Salon):
            db.session.query(model).delete()
        db.session.commit()
        print("Cleared existing data.")

        salon = Salon(name="Demo Kuaför")
        db.session.add(salon)
        db.session.flush()

        staff = Staff(salon_id=salon.id, full_name="Ayşe Usta")
        db.session.add(staff)

        customers = []
        for i in range(5):
            customers.append(Customer(
                salon_id=salon.id,
                full_name=f"Customer {i+1}",
                phone=f"+90 555 000 00{i:02d}",
            ))
        db.session.add_all(customers)
        db.session.flush()

        referred = Customer(
            salon_id=salon.id,
            full_name="Referred Customer",
            phone="+90 555 000 0099",
            referred_by=customers[0].id,
        )
        db.session.add(referred)
        db.session.commit()

        print(f"Created salon {salon.id} with staff {staff.id} and {len(customers) + 1} customers.")
        print("Database seeded!")

    app.cli.add_command(seed_command)

    return app
