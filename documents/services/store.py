"""
Persistence for DocumentRecord values.

Writes use compare-and-swap on ``Document.version``: the UPDATE only
matches the row the caller read. Zero rows matched means someone else
committed first and the whole transaction is rolled back with Conflict.
"""

import logging
from dataclasses import replace

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from documents.choices import AccessorialType, Kind, SignerRole, Status
from documents.models import Document, DocumentSignature
from documents.records import DocumentRecord, RateTerms, Signature
from documents.services.exceptions import Conflict, DocumentNotFound

logger = logging.getLogger(__name__)


def to_record(doc: Document) -> DocumentRecord:
    terms = None
    if doc.kind == Kind.RATE_CONFIRMATION:
        terms = RateTerms(
            rate_amount=doc.rate_amount,
            quantity=doc.quantity,
            quantity_unit=doc.quantity_unit,
            charges=doc.charges,
        )

    signatures = {
        SignerRole(sig.role): Signature(
            signer_name=sig.signer_name,
            image_png=bytes(sig.image),
            captured_at=sig.signed_at,
            ip_address=sig.ip_address or "",
        )
        for sig in doc.signatures.all()  # type: ignore
    }

    return DocumentRecord(
        reference=doc.reference,
        kind=Kind(doc.kind),
        status=Status(doc.status),
        version=doc.version,
        load_ref=doc.load_ref,
        terms=terms,
        signatures=signatures,
        details=dict(doc.details or {}),
        sent_at=doc.sent_at,
        signed_at=doc.signed_at,
        accepted_at=doc.accepted_at,
    )


def load(reference: str) -> DocumentRecord:
    try:
        doc = Document.objects.prefetch_related("signatures").get(
            reference=reference, is_active=True
        )
    except Document.DoesNotExist:
        raise DocumentNotFound(f"Document {reference} not found.", reference=reference)
    return to_record(doc)


def for_load(load_ref: str, statuses=None) -> list:
    qs = Document.objects.filter(load_ref=load_ref, is_active=True).prefetch_related(
        "signatures"
    )
    if statuses:
        qs = qs.filter(status__in=list(statuses))
    return [to_record(doc) for doc in qs.order_by("created_at")]


def _field_values(record: DocumentRecord) -> dict:
    values = {
        "status": record.status,
        "details": dict(record.details),
        "total_amount": record.total_amount,
        "sent_at": record.sent_at,
        "signed_at": record.signed_at,
        "accepted_at": record.accepted_at,
    }
    if record.terms:
        values.update(
            rate_amount=record.terms.rate_amount,
            quantity=record.terms.quantity,
            quantity_unit=record.terms.quantity_unit,
        )
        for charge in AccessorialType:
            values[charge.value] = record.terms.charges.get(charge, 0)
    return values


@transaction.atomic
def commit(record: DocumentRecord, expected_version: int) -> DocumentRecord:
    """
    Write ``record`` if the stored version is still ``expected_version``.

    Returns the record with its new version.

    Raises:
        DocumentNotFound: no such document
        Conflict: the stored version moved on
    """
    doc_id = (
        Document.objects.filter(reference=record.reference, is_active=True)
        .values_list("id", flat=True)
        .first()
    )
    if doc_id is None:
        raise DocumentNotFound(
            f"Document {record.reference} not found.", reference=record.reference
        )

    updated = Document.objects.filter(id=doc_id, version=expected_version).update(
        version=F("version") + 1,
        updated_at=timezone.now(),
        **_field_values(record),
    )
    if not updated:
        logger.warning(
            "Version conflict on %s (expected v%s)", record.reference, expected_version
        )
        raise Conflict(
            f"{record.reference} was modified by someone else. Reload and try again.",
            expected_version=expected_version,
        )

    for role, sig in record.signatures.items():
        DocumentSignature.objects.update_or_create(
            document_id=doc_id,
            role=role,
            defaults={
                "signer_name": sig.signer_name,
                "image": sig.image_png,
                "signed_at": sig.captured_at,
                "ip_address": sig.ip_address or None,
            },
        )

    return replace(record, version=expected_version + 1)
