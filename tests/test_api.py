import json
from datetime import timedelta
from urllib.parse import parse_qs, quote, urlparse

from salon_api.models import Customer, Salon, Staff, Visit, VisitToken
from salon_api.services.tokens import issue_visit_token
from salon_api.utils.time import parse_iso, to_utc, utcnow


def _start_visit(client, headers, customer, staff, services=None):
    payload = {"customerId": customer.id, "issuerId": staff.id}
    if services is not None:
        payload["services"] = services
    return client.post("/api/visit-tokens", json=payload, headers=headers)


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok"}


def test_issue_requires_bearer_token_401(client, customer, staff):
    r = _start_visit(client, {}, customer, staff)
    assert r.status_code == 401
    assert r.get_json()["code"] == "UNAUTHORIZED"


def test_issue_201_returns_redemption_and_qr_urls(client, staff_headers, customer, staff):
    r = _start_visit(client, staff_headers, customer, staff, services=["Kesim", "Boya"])
    assert r.status_code == 201
    body = r.get_json()

    url = urlparse(body["redemptionUrl"])
    assert url.path == "/checkin"
    query = parse_qs(url.query)
    assert query["token"] == [body["token"]]
    assert json.loads(query["services"][0]) == ["Kesim", "Boya"]

    qr = urlparse(body["qrImageUrl"])
    assert qr.netloc == "api.qrserver.com"
    assert parse_qs(qr.query)["data"] == [body["redemptionUrl"]]
    assert parse_qs(qr.query)["size"] == ["400x400"]
    assert body["expiresAt"].endswith("Z")


def test_issue_unknown_customer_404(client, staff_headers, staff):
    r = client.post("/api/visit-tokens", json={"customerId": 999, "issuerId": staff.id}, headers=staff_headers)
    assert r.status_code == 404
    assert r.get_json()["code"] == "CUSTOMER_NOT_FOUND"


def test_issue_staff_from_other_salon_404(client, db, staff_headers, customer):
    other = Salon(name="Other")
    db.session.add(other)
    db.session.flush()
    outsider = Staff(salon_id=other.id, full_name="Outsider")
    db.session.add(outsider)
    db.session.commit()

    r = _start_visit(client, staff_headers, customer, outsider)
    assert r.status_code == 404
    assert r.get_json()["code"] == "STAFF_NOT_FOUND"


def test_issue_invalid_payload(client, staff_headers):
    r = client.post("/api/visit-tokens", json={"customerId": "abc"}, headers=staff_headers)
    assert r.status_code == 422
    assert r.get_json()["code"] == "VALIDATION_ERROR"


def test_checkin_missing_token_400(client):
    r = client.post("/api/checkin", json={})
    assert r.status_code == 400
    assert r.get_json()["code"] == "MISSING_TOKEN"


def test_checkin_unknown_token_404(client):
    r = client.post("/api/checkin", json={"token": "does-not-exist"})
    assert r.status_code == 404
    assert r.get_json()["code"] == "INVALID_TOKEN"


def test_checkin_success_then_already_used(client, staff_headers, customer, staff):
    token = _start_visit(client, staff_headers, customer, staff).get_json()["token"]

    first = client.post("/api/checkin", json={"token": token, "services": ["Kesim", "Boya"]})
    assert first.status_code == 200
    assert first.get_json() == {"success": True, "customer": {"id": customer.id, "name": "Zeynep Kaya"}}

    second = client.post("/api/checkin", json={"token": token})
    assert second.status_code == 409
    assert second.get_json()["code"] == "TOKEN_ALREADY_USED"

    visits = Visit.query.filter_by(customer_id=customer.id).all()
    assert len(visits) == 1
    assert visits[0].services == ["Kesim", "Boya"]


def test_checkin_expired_410(client, db, customer, staff):
    issued = issue_visit_token(
        db.session, customer.salon_id, customer.id, staff.id,
        now=utcnow() - timedelta(seconds=61),
    )

    r = client.post("/api/checkin", json={"token": issued.token})
    assert r.status_code == 410
    assert r.get_json()["code"] == "TOKEN_EXPIRED"


def test_checkin_accepts_percent_encoded_services(client, staff_headers, customer, staff):
    token = _start_visit(client, staff_headers, customer, staff).get_json()["token"]
    encoded = quote(json.dumps(["Fön", "Manikür"]))

    r = client.post("/api/checkin", json={"token": token, "services": encoded})
    assert r.status_code == 200
    assert Visit.query.filter_by(customer_id=customer.id).one().services == ["Fön", "Manikür"]


def test_checkin_plain_service_string_becomes_single_label(client, staff_headers, customer, staff):
    token = _start_visit(client, staff_headers, customer, staff).get_json()["token"]

    r = client.post("/api/checkin", json={"token": token, "services": "Sakal tıraşı"})
    assert r.status_code == 200
    assert Visit.query.filter_by(customer_id=customer.id).one().services == ["Sakal tıraşı"]


def test_checkin_unexpected_error_500(client, staff_headers, customer, staff, monkeypatch):
    token = _start_visit(client, staff_headers, customer, staff).get_json()["token"]

    def boom(*args, **kwargs):
        raise RuntimeError("config missing")
    monkeypatch.setattr("salon_api.blueprints.checkin.redeem_visit_token", boom)

    r = client.post("/api/checkin", json={"token": token})
    assert r.status_code == 500
    body = r.get_json()
    assert body["code"] == "UNEXPECTED_ERROR"
    assert body["details"] == "config missing"


def test_token_status_moves_from_waiting_to_confirmed(client, staff_headers, customer, staff):
    token = _start_visit(client, staff_headers, customer, staff).get_json()["token"]

    before = client.get(f"/api/visit-tokens/{token}", headers=staff_headers).get_json()
    assert before["state"] == "waiting"
    assert before["usedAt"] is None

    client.post("/api/checkin", json={"token": token})

    after = client.get(f"/api/visit-tokens/{token}", headers=staff_headers).get_json()
    assert after["state"] == "confirmed"
    assert after["usedAt"] is not None


def test_token_status_expired(client, db, staff_headers, customer, staff):
    issued = issue_visit_token(
        db.session, customer.salon_id, customer.id, staff.id,
        now=utcnow() - timedelta(minutes=2),
    )

    body = client.get(f"/api/visit-tokens/{issued.token}", headers=staff_headers).get_json()
    assert body["state"] == "expired"


def test_token_status_unknown_404(client, staff_headers):
    r = client.get("/api/visit-tokens/nope", headers=staff_headers)
    assert r.status_code == 404


def test_loyalty_summary_after_checkin(client, db, staff_headers, customer, staff):
    token = _start_visit(client, staff_headers, customer, staff).get_json()["token"]
    client.post("/api/checkin", json={"token": token})

    r = client.get(f"/api/customers/{customer.id}/loyalty", headers=staff_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body["visits"] == 1
    assert body["level"]["level"] == "BRONZE"
    assert body["level"]["discount"] == 10
    assert body["nextLevel"]["level"] == "SILVER"
    assert body["visitsToNextLevel"] == 9
    assert body["lastVisitAt"] is not None
    assert db.session.get(Customer, customer.id).last_visit_at is not None


def test_loyalty_summary_unknown_customer_404(client, staff_headers):
    r = client.get("/api/customers/999/loyalty", headers=staff_headers)
    assert r.status_code == 404


def test_used_token_row_is_kept(client, staff_headers, customer, staff):
    token = _start_visit(client, staff_headers, customer, staff).get_json()["token"]
    client.post("/api/checkin", json={"token": token})

    assert VisitToken.query.filter_by(token=token).count() == 1


def test_issue_expires_at_matches_stored_value(client, staff_headers, customer, staff):
    body = _start_visit(client, staff_headers, customer, staff).get_json()
    row = VisitToken.query.filter_by(token=body["token"]).one()

    assert parse_iso(body["expiresAt"]) == to_utc(row.expires_at)

    polled = client.get(f"/api/visit-tokens/{body['token']}", headers=staff_headers).get_json()
    assert parse_iso(polled["expiresAt"]) == to_utc(row.expires_at)
