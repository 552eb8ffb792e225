import os
import tempfile

# Settings are read at import time, so the environment is prepared first
_db_dir = tempfile.mkdtemp(prefix="workwave-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from workwave.database import Base, SessionLocal, engine  # noqa: E402
from workwave.domain.payments.provider import (  # noqa: E402
    CheckoutSessionResult,
    PaymentIntentResult,
    PaymentProvider,
    StripePaymentProvider,
    get_payment_provider,
)
from workwave.errors import PaymentProviderError  # noqa: E402
from workwave.main import app  # noqa: E402

WEBHOOK_SECRET = "whsec_test"
PASSWORD = "password123"


class FakePaymentProvider(PaymentProvider):
    """Records provider calls and answers with predictable ids"""

    def __init__(self):
        self.calls = []
        self.fail = False
        self._signer = StripePaymentProvider(api_key="sk_test", webhook_secret=WEBHOOK_SECRET)

    def _record(self, call, **kwargs):
        if self.fail:
            raise PaymentProviderError("Provider unavailable")
        self.calls.append((call, kwargs))
        return len(self.calls)

    def calls_named(self, name):
        return [kwargs for call, kwargs in self.calls if call == name]

    def create_checkout_session(
        self, amount_minor, currency, name, description, success_url, cancel_url, metadata
    ):
        n = self._record(
            "checkout",
            amount_minor=amount_minor,
            currency=currency,
            name=name,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
        )
        return CheckoutSessionResult(
            id=f"cs_test_{n}", url=f"https://checkout.stripe.test/cs_test_{n}"
        )

    def create_payment_intent(self, amount_minor, currency, metadata):
        n = self._record(
            "payment_intent", amount_minor=amount_minor, currency=currency, metadata=metadata
        )
        return PaymentIntentResult(
            id=f"pi_test_{n}", client_secret=f"pi_test_{n}_secret", status="requires_payment_method"
        )

    def create_transfer(self, amount_minor, currency, destination, source_payment_intent_id, metadata):
        n = self._record(
            "transfer",
            amount_minor=amount_minor,
            currency=currency,
            destination=destination,
            source_payment_intent_id=source_payment_intent_id,
        )
        return f"tr_test_{n}"

    def create_refund(self, payment_intent_id):
        n = self._record("refund", payment_intent_id=payment_intent_id)
        return f"re_test_{n}"

    def construct_event(self, payload, signature):
        return self._signer.construct_event(payload, signature)


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def provider():
    fake = FakePaymentProvider()
    app.dependency_overrides[get_payment_provider] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_payment_provider, None)


def login_as(name, email, role):
    """Register a user and return a TestClient holding their session cookie"""
    http = TestClient(app)
    response = http.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": PASSWORD, "role": role},
    )
    assert response.status_code == 201, response.text
    response = http.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    http.user = response.json()["user"]
    return http


@pytest.fixture
def anonymous():
    return TestClient(app)


@pytest.fixture
def client(provider):
    return login_as("Carla Client", "carla@example.com", "CLIENT")


@pytest.fixture
def freelancer(provider):
    return login_as("Fred Freelancer", "fred@example.com", "FREELANCER")


@pytest.fixture
def outsider(provider):
    return login_as("Olive Outsider", "olive@example.com", "FREELANCER")


# ============================================================================
# WORKFLOW HELPERS
# ============================================================================


def post_project(http, **overrides):
    data = {
        "title": "Build a landing page",
        "description": "Responsive landing page with a signup form",
        "budget": 1500,
        "skills": ["html", "css"],
        "category": "Web Development",
    }
    data.update(overrides)
    response = http.post("/api/projects", json=data)
    assert response.status_code == 201, response.text
    return response.json()


def place_bid(http, project_id, amount=1200):
    response = http.post(
        "/api/bids",
        json={
            "projectId": project_id,
            "amount": amount,
            "deliveryTime": 14,
            "coverLetter": "I have built many landing pages",
        },
    )
    assert response.status_code == 200, response.text
    return response.json()["bid"]


def sign_contract(http, bid_id, milestones=None, amount=1000):
    if milestones is None:
        milestones = [
            {"title": "Design", "description": "Mockups", "amount": 400},
            {"title": "Build", "description": "Implementation", "amount": 600},
        ]
    response = http.post(
        "/api/contracts",
        json={
            "bidId": bid_id,
            "terms": "Deliver the work described in the project",
            "amount": amount,
            "milestones": milestones,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["contract"]


@pytest.fixture
def contract(client, freelancer):
    """An APPROVAL contract between client and freelancer with two milestones (400 + 600)"""
    project = post_project(client)
    bid = place_bid(freelancer, project["id"])
    return sign_contract(client, bid["id"])


def set_milestone_status(http, milestone_id, status):
    return http.put(f"/api/milestones/{milestone_id}", json={"status": status})
