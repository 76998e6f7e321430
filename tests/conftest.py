import pytest

from documents.factories import (
    BillOfLadingFactory,
    ProofOfDeliveryFactory,
    RateConfirmationFactory,
    UserFactory,
    signature_for,
)


@pytest.fixture
def user_factory():
    return UserFactory


@pytest.fixture
def rate_confirmation_factory():
    return RateConfirmationFactory


@pytest.fixture
def bol_factory():
    return BillOfLadingFactory


@pytest.fixture
def pod_factory():
    return ProofOfDeliveryFactory


@pytest.fixture
def make_signature():
    return signature_for


@pytest.fixture
def signature():
    return signature_for("J. Rivera")


@pytest.fixture
def make_user(user_factory):
    def _make(role):
        return user_factory(username=f"{role}_user", role=role)

    return _make


@pytest.fixture
def broker(make_user):
    return make_user("broker")


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def carrier(make_user):
    return make_user("carrier")


@pytest.fixture
def shipper(make_user):
    return make_user("shipper")


@pytest.fixture
def driver(make_user):
    return make_user("driver")


@pytest.fixture
def receiver(make_user):
    return make_user("receiver")
