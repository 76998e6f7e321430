import pytest

from documents.choices import Action, Kind, SignerRole, Status
from documents.policies.document_actions import actions_for, permitted_actions
from documents.records import DocumentRecord


class FakeUser:
    def __init__(self, role, is_superuser=False):
        self.role = role
        self.is_superuser = is_superuser


def _doc(kind=Kind.RATE_CONFIRMATION, status=Status.DRAFT, signatures=None):
    return DocumentRecord(reference="X-1", kind=kind, status=status, signatures=signatures or {})


@pytest.mark.parametrize(
    "role, expected",
    [
        ("broker", {Action.SEND, Action.ACCEPT}),
        ("customer", {Action.CUSTOMER_SIGN}),
        ("carrier", {Action.CARRIER_SIGN}),
        ("shipper", {Action.SHIPPER_SIGN}),
        ("driver", {Action.DRIVER_SIGN}),
        ("receiver", {Action.RECEIVER_SIGN}),
        ("admin", set(Action)),
        ("dispatcher", set()),
    ],
)
def test_permitted_actions_by_role(role, expected):
    assert permitted_actions(FakeUser(role)) == expected


def test_superuser_can_do_everything():
    assert permitted_actions(FakeUser("customer", is_superuser=True)) == set(Action)


def test_actions_for_combines_role_and_status():
    broker = FakeUser("broker")
    carrier = FakeUser("carrier")

    assert actions_for(broker, _doc()) == ["send"]
    assert actions_for(carrier, _doc()) == []
    assert actions_for(carrier, _doc(status=Status.SENT)) == ["carrier_sign"]
    assert actions_for(broker, _doc(status=Status.ACCEPTED)) == []


def test_driver_on_bol(signature):
    driver = FakeUser("driver")
    bol = _doc(kind=Kind.BILL_OF_LADING, status=Status.UNSIGNED)
    assert actions_for(driver, bol) == ["driver_sign"]

    done = _doc(
        kind=Kind.BILL_OF_LADING,
        status=Status.FULLY_SIGNED,
        signatures={SignerRole.DRIVER: signature, SignerRole.SHIPPER: signature},
    )
    assert actions_for(driver, done) == []
