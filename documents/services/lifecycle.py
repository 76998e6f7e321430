"""
Lifecycle controller.

``apply_action`` computes the next state of a document and nothing else.
``perform_action`` is the service entry point used by the views: load,
check the caller's version, apply, persist. Notifying the user is left to
the caller through the returned message.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from django.utils import timezone

from documents.choices import Action, SignerRole, Status
from documents.records import DeliveryReceipt, DocumentRecord, Signature
from documents.services import store
from documents.services.exceptions import (
    Conflict,
    EmptySignature,
    InvalidTransition,
    MissingDeliveryData,
)
from documents.services.transitions import (
    SIGNER_FOR_ACTION,
    rank,
    required_signers,
    resolve,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    document: DocumentRecord
    message: str


def apply_action(
    document: DocumentRecord,
    action,
    signature: Optional[Signature] = None,
    delivery: Optional[DeliveryReceipt] = None,
    now=None,
    require_both: Optional[bool] = None,
) -> DocumentRecord:
    """
    Return ``document`` advanced by ``action``. The input is never modified.

    Raises:
        InvalidTransition: action not legal from the current status
        EmptySignature: a signing action without a captured signature
        MissingDeliveryData: receiver signing a POD without a receipt
    """
    decision = resolve(
        document.kind,
        document.status,
        action,
        signed_roles=document.signed_roles,
        require_both=require_both,
    )
    now = now or timezone.now()
    updated = replace(document, status=decision.status)

    if decision.signer:
        if signature is None:
            raise EmptySignature(
                f"{SignerRole(decision.signer).label} signature is required."
            )
        updated = updated.with_signature(decision.signer, signature)

    if decision.needs_delivery:
        if delivery is None:
            raise MissingDeliveryData(
                "Receiver must provide delivery data (actual quantity, condition)."
            )
        if delivery.received_at is None:
            delivery = replace(delivery, received_at=now)
        details = dict(updated.details)
        details["delivery"] = delivery.to_dict()
        updated = replace(updated, details=details)

    if decision.status == Status.SENT and document.status == Status.DRAFT:
        updated = replace(updated, sent_at=now)
    if decision.status in (Status.SIGNED, Status.FULLY_SIGNED) and not document.signed_at:
        updated = replace(updated, signed_at=now)
    if decision.status == Status.ACCEPTED:
        updated = replace(updated, accepted_at=now)

    if rank(updated.kind, updated.status) < rank(document.kind, document.status):
        raise InvalidTransition(
            f"{document.reference} cannot move back from {document.status} to {updated.status}."
        )
    return updated


def describe(before: DocumentRecord, after: DocumentRecord, action) -> str:
    """User-facing outcome text for a successful action."""
    action = Action(action)
    label = after.kind.label

    if action == Action.SEND:
        return f"{label} {after.reference} sent for signature."
    if action == Action.ACCEPT:
        return f"{label} {after.reference} accepted. Load is now confirmed."

    signer = SIGNER_FOR_ACTION[action].label
    if after.status in (Status.SIGNED, Status.FULLY_SIGNED) and after.status != before.status:
        return f"{signer} signature captured. {label} {after.reference} is fully signed."

    missing = sorted(
        role.label.lower() for role in required_signers(after.kind) - after.signed_roles
    )
    if missing:
        return f"{signer} signature captured. Waiting for {' and '.join(missing)} signature."
    return f"{signer} signature captured."


def perform_action(
    reference: str,
    action,
    expected_version: Optional[int] = None,
    signature: Optional[Signature] = None,
    delivery: Optional[DeliveryReceipt] = None,
    actor=None,
) -> ActionResult:
    """
    Apply ``action`` to the stored document and persist it.

    ``expected_version`` is the version the caller last read. A mismatch,
    or another writer committing first, raises Conflict and nothing is
    written.
    """
    document = store.load(reference)

    if expected_version is not None and document.version != expected_version:
        logger.warning(
            "Stale %s on %s: client has v%s, current is v%s",
            action,
            reference,
            expected_version,
            document.version,
        )
        raise Conflict(
            f"{reference} was modified by someone else. Reload and try again.",
            current_version=document.version,
        )

    try:
        updated = apply_action(document, action, signature=signature, delivery=delivery)
    except InvalidTransition as e:
        logger.warning("Rejected %s on %s: %s", action, reference, e.message)
        raise

    saved = store.commit(updated, expected_version=document.version)
    logger.info(
        "%s %s: %s -> %s by %s (v%s)",
        reference,
        action,
        document.status,
        saved.status,
        getattr(actor, "username", "system"),
        saved.version,
    )
    return ActionResult(document=saved, message=describe(document, saved, action))
