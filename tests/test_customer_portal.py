"""
Customer portal: token-only access to a quote, approve and reject.
"""

from datetime import datetime, timedelta

from backend import models


def test_view_quote_by_token(client, quote):
    resp = client.get(f"/api/customer/quote/{quote['portalToken']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["quote"]["quoteNumber"] == quote["quoteNumber"]
    assert "portalToken" not in data["quote"]
    assert data["customer"]["companyName"] == "Acme Dental"
    assert data["serviceTitle"] == "Fixed Wireless Access"
    assert data["company"]["name"] == "NXTKonekt"
    assert data["company"]["partner"] == "Wireless Partners LLC"
    assert data["isExpired"] is False
    assert data["statementOfWorkKey"] == "primary_with_antenna"
    assert data["lineItems"][-1]["key"] == "total"


def test_unknown_token(client):
    assert client.get("/api/customer/quote/nope").status_code == 404
    assert client.post("/api/customer/quote/nope/approve").status_code == 404


def test_approve_with_feedback(client, quote):
    resp = client.post(
        f"/api/customer/quote/{quote['portalToken']}/approve",
        json={"feedback": "Please schedule for a Tuesday"},
    )
    assert resp.status_code == 200
    data = resp.json()["quote"]
    assert data["status"] == "approved"
    assert data["approvedAt"] is not None
    assert data["customerFeedback"] == "Please schedule for a Tuesday"


def test_reject_without_body(client, quote):
    resp = client.post(f"/api/customer/quote/{quote['portalToken']}/reject")
    assert resp.status_code == 200
    data = resp.json()["quote"]
    assert data["status"] == "rejected"
    assert data["rejectedAt"] is not None
    assert data["customerFeedback"] is None


def test_only_pending_quotes_take_an_answer(client, quote):
    client.post(f"/api/customer/quote/{quote['portalToken']}/approve")
    resp = client.post(f"/api/customer/quote/{quote['portalToken']}/reject")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Quote is already approved"


def test_unknown_action(client, quote):
    resp = client.post(f"/api/customer/quote/{quote['portalToken']}/maybe")
    assert resp.status_code == 400


def test_expired_flag(client, quote, db):
    stored = db.query(models.Quote).filter(models.Quote.id == quote["id"]).first()
    stored.expires_at = datetime.utcnow() - timedelta(days=1)
    db.commit()

    data = client.get(f"/api/customer/quote/{quote['portalToken']}").json()
    assert data["isExpired"] is True


def test_partner_sees_customer_decision(client, auth_headers, quote):
    client.post(f"/api/customer/quote/{quote['portalToken']}/approve")
    assert client.get(f"/api/quotes/{quote['id']}", headers=auth_headers).json()["status"] == "approved"
