"""Integration tests for the order status webhook via TestClient."""

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from notifications.api.dependencies import (
    get_dispatcher,
    get_email_settings,
    get_email_transport,
    get_order_status_renderer,
)
from notifications.api.routes import router
from notifications.config import EmailSettings
from notifications.notification.dispatch import NotificationDispatcher

SECRET = "s" * 40
URL = "/notifications/order-status"


def _payload(**overrides):
    payload = {
        "orderId": "ORD-1740830400-K3Z9",
        "customerEmail": "customer@example.com",
        "customerName": "Ana",
        "orderStatus": "shipped",
        "orderData": {
            "items": [{"id": 7, "name": "Chronograph", "price": 150.0, "quantity": 1}],
            "subtotal": 150.0,
            "shipping": 5.95,
            "total": 155.95,
            "createdAt": "2025-03-01T12:00:00Z",
        },
        "previousOrderStatus": "processing",
    }
    payload.update(overrides)
    return payload


def _headers(secret=SECRET):
    return {"X-Webhook-Secret": secret}


class ExplodingRenderer:
    @staticmethod
    def render(context):
        raise RuntimeError("template crashed")


@pytest.fixture()
def settings():
    return EmailSettings(webhook_secret=SECRET, environment="test")


@pytest.fixture()
def app(transport, sleep, settings):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_email_settings] = lambda: settings
    app.dependency_overrides[get_dispatcher] = lambda: NotificationDispatcher(
        transport=transport,
        recipient_override=settings.effective_recipient_override,
        sleep=sleep,
    )
    return app


@pytest.fixture()
def client(app):
    return TestClient(app)


class TestSecretValidation:
    def test_wrong_secret_is_rejected(self, client, transport):
        response = client.post(URL, json=_payload(), headers=_headers("wrong-secret"))

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized - Invalid webhook secret"}
        assert transport.call_count == 0

    def test_missing_secret_is_rejected(self, client, transport):
        response = client.post(URL, json=_payload())

        assert response.status_code == 401
        assert transport.call_count == 0

    def test_unconfigured_secret_rejects_everything(self, app, client, transport):
        app.dependency_overrides[get_email_settings] = lambda: EmailSettings(webhook_secret=None)
        response = client.post(URL, json=_payload(), headers=_headers(""))

        assert response.status_code == 401
        assert transport.call_count == 0

    def test_secret_checked_before_body(self, client):
        response = client.post(URL, content=b"{not json", headers=_headers("wrong"))
        assert response.status_code == 401


class TestPayloadValidation:
    def test_malformed_json(self, client, transport):
        response = client.post(
            URL, content=b"{not json", headers={**_headers(), "Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON body"}
        assert transport.call_count == 0

    @pytest.mark.parametrize("field", ["orderId", "customerEmail", "orderStatus", "orderData"])
    def test_missing_required_field(self, client, transport, field):
        payload = _payload()
        del payload[field]
        response = client.post(URL, json=payload, headers=_headers())

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: orderId, customerEmail, orderStatus, orderData"}
        assert transport.call_count == 0

    @pytest.mark.parametrize("email", ["customer", "customer@example", "cust omer@example.com", "@example.com"])
    def test_invalid_email(self, client, transport, email):
        response = client.post(URL, json=_payload(customerEmail=email), headers=_headers())

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid email format"}
        assert transport.call_count == 0

    def test_invalid_status(self, client, transport):
        response = client.post(URL, json=_payload(orderStatus="teleported"), headers=_headers())

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid order status"}
        assert transport.call_count == 0

    def test_total_must_match(self, client, transport):
        payload = _payload()
        payload["orderData"]["total"] = 160.0
        response = client.post(URL, json=payload, headers=_headers())

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid order data"}
        assert transport.call_count == 0

    def test_non_object_body(self, client):
        response = client.post(URL, json=["not", "an", "object"], headers=_headers())
        assert response.status_code == 400
        assert list(response.json()) == ["error"]


class TestDelivery:
    def test_shipped_order_notification(self, client, transport):
        response = client.post(URL, json=_payload(), headers=_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["providerMessageId"] == transport.sent_emails[0]["message_id"]
        assert body["message"] == "Email sent to customer@example.com"
        assert "error" not in body

        sent = transport.sent_emails[0]
        assert sent["to"] == ["customer@example.com"]
        assert sent["subject"] == "🚚 Order ORD-1740830400-K3Z9 update - Shipped"
        assert "Total: €155.95" in sent["body"]
        assert sent["tags"] == {"category": "order-status", "orderId": "ORD-1740830400-K3Z9", "status": "shipped"}

    def test_failed_delivery_still_returns_200(self, client, transport, sleep):
        transport.configure(should_succeed=False, failure_reason="Domain not verified")
        response = client.post(URL, json=_payload(), headers=_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Domain not verified"
        assert "providerMessageId" not in body
        assert transport.call_count == 3
        assert sleep.delays == [1.0, 2.0]

    def test_transport_exception_returns_200(self, client, transport):
        transport.configure(should_succeed=False, raise_error=httpx.ConnectError("connection refused"))
        response = client.post(URL, json=_payload(), headers=_headers())

        assert response.status_code == 200
        assert response.json()["success"] is False

    def test_unexpected_error_returns_200(self, app, client, transport):
        app.dependency_overrides[get_order_status_renderer] = lambda: ExplodingRenderer
        response = client.post(URL, json=_payload(), headers=_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert "template crashed" not in body["error"]
        assert transport.call_count == 0

    def test_recovers_after_transient_failures(self, client, transport, sleep):
        transport.configure(fail_times=2)
        response = client.post(URL, json=_payload(), headers=_headers())

        assert response.json()["success"] is True
        assert sleep.delays == [1.0, 2.0]

    def test_recipient_override(self, client, transport, settings):
        override = EmailSettings(webhook_secret=SECRET, recipient_override="qa@storefront.example")
        client.app.dependency_overrides[get_email_settings] = lambda: override
        client.app.dependency_overrides[get_dispatcher] = lambda: NotificationDispatcher(
            transport=transport, recipient_override=override.recipient_override
        )
        response = client.post(URL, json=_payload(), headers=_headers())

        assert response.json()["success"] is True
        assert transport.sent_emails[0]["to"] == ["qa@storefront.example"]

    def test_override_ignored_in_production(self, client, transport):
        production = EmailSettings(
            webhook_secret=SECRET, recipient_override="qa@storefront.example", environment="production"
        )
        client.app.dependency_overrides[get_email_settings] = lambda: production
        client.app.dependency_overrides[get_email_transport] = lambda: transport
        del client.app.dependency_overrides[get_dispatcher]
        response = client.post(URL, json=_payload(), headers=_headers())

        assert response.json()["success"] is True
        assert transport.sent_emails[0]["to"] == ["customer@example.com"]

    def test_duplicate_webhooks_send_twice(self, client, transport):
        client.post(URL, json=_payload(), headers=_headers())
        client.post(URL, json=_payload(), headers=_headers())

        assert len(transport.sent_emails) == 2

    def test_optional_fields_may_be_omitted(self, client, transport):
        payload = _payload()
        del payload["customerName"]
        del payload["previousOrderStatus"]
        del payload["orderData"]["createdAt"]
        response = client.post(URL, json=payload, headers=_headers())

        assert response.status_code == 200
        assert response.json()["success"] is True
