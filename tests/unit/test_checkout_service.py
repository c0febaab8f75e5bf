import pytest

from providers_hub import config
from providers_hub.payments import service as payments_service
from providers_hub.payments.errors import CheckoutValidationError, PlanNotFoundError, UpstreamError
from providers_hub.payments.purchases import PurchaseRequest
from providers_hub.payments.service import resolve_base_url

BASE = "https://app.example.com"


def _request(**kwargs) -> PurchaseRequest:
    return PurchaseRequest.model_validate(kwargs)

def test_buyer_pro_session_spec(checkout_builder, plan_store, fake_gateway):
    res = checkout_builder.create_checkout_session(_request(type="buyer_pro", userId="u1"), BASE)
    assert res == {"url": fake_gateway.url}
    assert [c[:2] for c in plan_store.calls] == [("plans", "buyer-pro")]

    params = fake_gateway.specs[0].to_stripe_params()
    assert params["mode"] == "subscription"
    assert params["payment_method_types"] == ["card"]
    item = params["line_items"][0]
    assert item["quantity"] == 1
    assert item["price_data"] == {
        "currency": "gbp",
        "unit_amount": 2999,
        "product_data": {"name": "Buyer Pro"},
        "recurring": {"interval": "month"},
    }
    assert params["success_url"] == f"{BASE}/plans?status=success"
    assert params["cancel_url"] == f"{BASE}/plans?status=cancelled"
    assert params["metadata"] == {"type": "buyer_pro", "user_id": "u1", "plan_id": "plan-bp", "plan_slug": "buyer-pro"}

def test_buyer_pro_ignores_client_slug_and_falls_back_on_name(checkout_builder, plan_store, fake_gateway):
    plan_store.rows[("plans", "buyer-pro")] = {"id": "p", "name": None, "price_cents": 1000, "billing_interval": None}
    checkout_builder.create_checkout_session(_request(type="buyer_pro", userId="u1", planSlug="other"), BASE)
    assert plan_store.calls[0][:2] == ("plans", "buyer-pro")
    price_data = fake_gateway.specs[0].to_stripe_params()["line_items"][0]["price_data"]
    assert price_data["product_data"]["name"] == "Buyer Pro Membership"
    assert price_data["recurring"] == {"interval": "month"}

def test_tokens_session_spec(checkout_builder, plan_store, fake_gateway):
    checkout_builder.create_checkout_session(_request(type="tokens", userId="u2", planSlug="tokens-3"), BASE)
    assert plan_store.calls[0][:2] == ("token_plans", "tokens-3")

    params = fake_gateway.specs[0].to_stripe_params()
    assert params["mode"] == "payment"
    price_data = params["line_items"][0]["price_data"]
    assert price_data["unit_amount"] == 1500
    assert price_data["product_data"]["name"] == "3 Tokens"
    assert "recurring" not in price_data
    assert params["success_url"] == f"{BASE}/seller/tokens?status=success"
    assert params["cancel_url"] == f"{BASE}/seller/tokens?status=cancelled"
    assert params["metadata"] == {
        "type": "tokens",
        "user_id": "u2",
        "plan_id": "tp-3",
        "plan_slug": "tokens-3",
        "tokens": "3",
        "amount_gbp": "15",
    }

def test_tokens_require_plan_slug_before_any_read(checkout_builder, plan_store, fake_gateway):
    with pytest.raises(CheckoutValidationError) as exc:
        checkout_builder.create_checkout_session(_request(type="tokens", userId="u2"), BASE)
    assert exc.value.public_message == "planSlug is required for token purchases"
    assert exc.value.status_code == 400
    assert plan_store.calls == []
    assert fake_gateway.specs == []

def test_seller_plus_defaults_slug_and_rounds_price(checkout_builder, plan_store, fake_gateway):
    checkout_builder.create_checkout_session(_request(type="seller_plus", userId="u3"), BASE)
    assert plan_store.calls[0][:2] == ("token_plans", "seller-plus")

    params = fake_gateway.specs[0].to_stripe_params()
    assert params["mode"] == "subscription"
    price_data = params["line_items"][0]["price_data"]
    assert price_data["unit_amount"] == 4999
    assert price_data["recurring"] == {"interval": "month"}
    assert price_data["product_data"]["name"] == "Seller Plus"
    assert params["success_url"] == f"{BASE}/seller/dashboard?status=seller_plus_success"
    assert params["cancel_url"] == f"{BASE}/seller/tokens?status=cancelled"
    assert params["metadata"] == {"type": "seller_plus", "user_id": "u3", "plan_slug": "seller-plus"}

def test_seller_plus_uses_client_slug_when_given(checkout_builder, plan_store):
    plan_store.rows[("token_plans", "seller-plus-annual")] = {"id": "x", "name": None, "tokens": 0, "price": "99.995"}
    checkout_builder.create_checkout_session(_request(type="seller_plus", userId="u3", planSlug="seller-plus-annual"), BASE)
    assert plan_store.calls[0][:2] == ("token_plans", "seller-plus-annual")

@pytest.mark.parametrize("payload", [
    {"type": "buyer_pro"},
    {"userId": "u1"},
    {"type": "", "userId": "u1"},
    {"type": "buyer_pro", "userId": ""},
])
def test_missing_type_or_user_is_rejected_without_side_effects(checkout_builder, plan_store, fake_gateway, payload):
    with pytest.raises(CheckoutValidationError) as exc:
        checkout_builder.create_checkout_session(_request(**payload), BASE)
    assert exc.value.public_message == "Missing type or userId"
    assert plan_store.calls == []
    assert fake_gateway.specs == []

@pytest.mark.parametrize("purchase_type", ["gift_card", "BUYER_PRO", "token", "subscription"])
def test_unsupported_type_performs_no_external_call(checkout_builder, plan_store, fake_gateway, purchase_type):
    with pytest.raises(CheckoutValidationError) as exc:
        checkout_builder.create_checkout_session(_request(type=purchase_type, userId="u1"), BASE)
    assert exc.value.public_message == "Unsupported purchase type"
    assert plan_store.calls == []
    assert fake_gateway.specs == []

@pytest.mark.parametrize("payload, message", [
    ({"type": "buyer_pro", "userId": "u1"}, "Buyer Pro plan not found"),
    ({"type": "tokens", "userId": "u1", "planSlug": "missing"}, "Token plan not found"),
    ({"type": "seller_plus", "userId": "u1", "planSlug": "missing"}, "Seller Plus plan not found"),
])
def test_plan_not_found_message_per_type(checkout_builder, plan_store, fake_gateway, payload, message):
    plan_store.rows.clear()
    with pytest.raises(PlanNotFoundError) as exc:
        checkout_builder.create_checkout_session(_request(**payload), BASE)
    assert exc.value.public_message == message
    assert exc.value.status_code == 400
    assert fake_gateway.specs == []

def test_gateway_failure_is_upstream_error_with_generic_message(checkout_builder, fake_gateway):
    fake_gateway.error = RuntimeError("stripe: invalid api key sk_live_xxx")
    with pytest.raises(UpstreamError) as exc:
        checkout_builder.create_checkout_session(_request(type="buyer_pro", userId="u1"), BASE)
    assert exc.value.public_message == "Failed to create checkout session"
    assert "sk_live" not in exc.value.public_message

def test_resolve_base_url_prefers_frontend_url(monkeypatch):
    monkeypatch.setattr(config, "FRONTEND_URL", "https://care.example.com/")
    monkeypatch.setattr(config, "PLATFORM_URL", "https://site.netlify.app")
    assert resolve_base_url({"host": "api.example.com"}) == "https://care.example.com"

def test_resolve_base_url_platform_url_then_headers_then_localhost(monkeypatch):
    monkeypatch.setattr(config, "PLATFORM_URL", "https://site.netlify.app/")
    assert resolve_base_url({}) == "https://site.netlify.app"
    monkeypatch.setattr(config, "PLATFORM_URL", "")
    assert resolve_base_url({"host": "api.example.com"}) == "https://api.example.com"
    assert resolve_base_url({"host": "localhost:8000", "x-forwarded-proto": "http"}) == "http://localhost:8000"
    assert resolve_base_url({}) == "http://localhost:5173"

def test_get_checkout_builder_requires_stripe_and_supabase(monkeypatch):
    monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "")
    assert payments_service.get_checkout_builder() is None
    monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr(config, "SUPABASE_SERVICE_KEY", "")
    assert payments_service.get_checkout_builder() is None

def test_get_checkout_builder_is_cached(monkeypatch):
    first = payments_service.get_checkout_builder()
    assert first is not None
    assert payments_service.get_checkout_builder() is first
