import os

# Pas de Redis en tests: le lifespan saute l'init de fastapi-limiter
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Any, Dict, Generator, List, Optional, Tuple
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from providers_hub import config
from providers_hub.asgi import app as fastapi_app
from providers_hub.payments import service as payments_service
from providers_hub.payments.plans import PlanResolver
from providers_hub.payments.service import CheckoutSessionBuilder
from providers_hub.signup.models import SignupResult
from providers_hub.signup.service import SignupWizardService, WizardRegistry, get_wizard_service
from providers_hub.utils.security import require_user

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakePlanStore:
    """Tables plans/token_plans en mémoire; enregistre chaque lecture."""

    def __init__(self, rows: Optional[Dict[Tuple[str, str], Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.rows = rows or {}
        self.error = error
        self.calls: List[Tuple[str, str, str]] = []

    def fetch_active(self, table: str, slug: str, columns: str):
        self.calls.append((table, slug, columns))
        if self.error:
            raise self.error
        return self.rows.get((table, slug))

    def list_active(self, table: str, columns: str = "*", order_by: Optional[str] = None):
        return [row for (t, _), row in self.rows.items() if t == table]


class FakeGateway:
    def __init__(self, url: str = "https://checkout.stripe.test/c/pay/cs_test_123", error: Optional[Exception] = None):
        self.url = url
        self.error = error
        self.specs: List[Any] = []

    def create_checkout_session(self, spec) -> str:
        self.specs.append(spec)
        if self.error:
            raise self.error
        return self.url


class FakeAuthProvider:
    def __init__(self, result: Optional[SignupResult] = None, error: Optional[Exception] = None):
        self.result = result or SignupResult(success=True, requires_confirmation=True)
        self.error = error
        self.calls: List[Tuple[str, str, str, str]] = []

    async def __call__(self, email: str, password: str, name: str, role: str) -> SignupResult:
        self.calls.append((email, password, name, role))
        if self.error:
            raise self.error
        return self.result


DEFAULT_PLAN_ROWS = {
    ("plans", "buyer-pro"): {"id": "plan-bp", "name": "Buyer Pro", "price_cents": 2999, "billing_interval": "month"},
    ("token_plans", "tokens-3"): {"id": "tp-3", "name": "Starter pack", "tokens": 3, "price": None},
    ("token_plans", "seller-plus"): {"id": "tp-sp", "name": "Seller Plus", "tokens": 0, "price": 49.99},
}


@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    # Contexte obligatoire: la boucle du portail reste active entre requêtes (tâches du wizard)
    with TestClient(app) as c:
        yield c

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    fake_user: Dict[str, Any] = {
        "id": "test-user",
        "email": "buyer@example.com",
        "name": "buyer",
        "role": "client",
        "metadata": {"name": "buyer", "role": "client"},
        "token": "fake-token",
    }
    app.dependency_overrides[require_user] = lambda: fake_user
    try:
        yield fake_user
    finally:
        app.dependency_overrides.pop(require_user, None)

# Configuration déterministe: pas de FRONTEND_URL, Stripe/Supabase présents
@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    monkeypatch.setattr(config, "FRONTEND_URL", "")
    monkeypatch.setattr(config, "PLATFORM_URL", "")
    monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr(config, "SUPABASE_URL", "https://project.supabase.test")
    monkeypatch.setattr(config, "SUPABASE_SERVICE_KEY", "service-role-key")
    payments_service.reset_checkout_builder()
    yield
    payments_service.reset_checkout_builder()

# Aucun accès réseau Supabase depuis les repositories
@pytest.fixture(autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("providers_hub.auth.repository.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("providers_hub.categories.repository.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("providers_hub.projects.repository.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr("providers_hub.payments.service.get_service_supabase", lambda: MagicMock())

@pytest.fixture
def plan_store() -> FakePlanStore:
    return FakePlanStore(dict(DEFAULT_PLAN_ROWS))

@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()

@pytest.fixture
def checkout_builder(plan_store, fake_gateway) -> CheckoutSessionBuilder:
    return CheckoutSessionBuilder(gateway=fake_gateway, plans=PlanResolver(plan_store))

@pytest.fixture
def checkout_api(monkeypatch, checkout_builder, plan_store, fake_gateway):
    """Branche le builder factice sur l'endpoint de checkout."""
    monkeypatch.setattr(payments_service, "get_checkout_builder", lambda: checkout_builder)
    return plan_store, fake_gateway

@pytest.fixture
def auth_provider() -> FakeAuthProvider:
    return FakeAuthProvider()

@pytest.fixture
def wizard_service(app, auth_provider) -> Generator[SignupWizardService, None, None]:
    service = SignupWizardService(
        auth_provider=auth_provider,
        registry=WizardRegistry(retention_seconds=60),
        confirmation_timeout=5,
    )
    app.dependency_overrides[get_wizard_service] = lambda: service
    try:
        yield service
    finally:
        app.dependency_overrides.pop(get_wizard_service, None)
