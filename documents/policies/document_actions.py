from documents.choices import Action
from documents.policies.roles import (
    is_admin,
    is_broker,
    is_carrier,
    is_customer,
    is_driver,
    is_receiver,
    is_shipper,
)
from documents.records import DocumentRecord
from documents.services.transitions import legal_actions


def permitted_actions(user) -> set:
    """Actions the user's role may ever perform, regardless of status."""
    if is_admin(user):
        return set(Action)

    actions = set()
    if is_broker(user):
        actions |= {Action.SEND, Action.ACCEPT}
    if is_customer(user):
        actions.add(Action.CUSTOMER_SIGN)
    if is_carrier(user):
        actions.add(Action.CARRIER_SIGN)
    if is_shipper(user):
        actions.add(Action.SHIPPER_SIGN)
    if is_driver(user):
        actions.add(Action.DRIVER_SIGN)
    if is_receiver(user):
        actions.add(Action.RECEIVER_SIGN)
    return actions


def actions_for(user, document: DocumentRecord) -> list[str]:
    """
    Actions this user can perform on this document RIGHT NOW.

    Role filter first, then the transition gate. Terminal documents
    have none.
    """
    allowed = permitted_actions(user)
    return [
        str(action)
        for action in legal_actions(
            document.kind, document.status, signed_roles=document.signed_roles
        )
        if action in allowed
    ]
