from dataclasses import replace

import pytest

from documents.choices import Kind, SignerRole, Status
from documents.models import Document, DocumentSignature
from documents.services import store
from documents.services.exceptions import Conflict, DocumentNotFound

pytestmark = pytest.mark.django_db


def test_load_round_trips_terms_and_signatures(rate_confirmation_factory, signature):
    doc = rate_confirmation_factory(reference="RC-001", status=Status.SENT)
    record = store.load("RC-001")
    assert record.kind == Kind.RATE_CONFIRMATION
    assert record.total_amount == doc.total_amount

    saved = store.commit(
        record.with_signature(SignerRole.CARRIER, signature), expected_version=record.version
    )
    reloaded = store.load("RC-001")

    assert saved.version == record.version + 1
    assert reloaded.version == saved.version
    assert reloaded.signatures[SignerRole.CARRIER] == signature
    assert reloaded.terms == record.terms


def test_commit_with_stale_version_writes_nothing(rate_confirmation_factory, signature):
    rate_confirmation_factory(reference="RC-001", status=Status.SENT)
    record = store.load("RC-001")
    store.commit(replace(record, details={"note": "first"}), expected_version=1)

    stale = replace(record, status=Status.SIGNED).with_signature(SignerRole.CUSTOMER, signature)
    with pytest.raises(Conflict):
        store.commit(stale, expected_version=1)

    doc = Document.objects.get(reference="RC-001")
    assert doc.version == 2
    assert doc.status == Status.SENT
    assert doc.details == {"note": "first"}
    assert not DocumentSignature.objects.filter(document=doc).exists()


def test_commit_unknown_document(signature):
    from documents.records import DocumentRecord

    record = DocumentRecord(reference="RC-404", kind=Kind.RATE_CONFIRMATION, status=Status.DRAFT)
    with pytest.raises(DocumentNotFound):
        store.commit(record, expected_version=1)


def test_inactive_documents_are_not_found(bol_factory):
    bol_factory(load_ref="LD1", is_active=False)
    with pytest.raises(DocumentNotFound):
        store.load("BOL-LD1")


def test_for_load_filters_by_status(rate_confirmation_factory, bol_factory, pod_factory):
    rate_confirmation_factory(load_ref="LD7", status=Status.ACCEPTED)
    bol_factory(load_ref="LD7", status=Status.FULLY_SIGNED)
    pod_factory(load_ref="LD7", status=Status.DRIVER_SIGNED)
    bol_factory(load_ref="LD8", status=Status.FULLY_SIGNED)

    everything = store.for_load("LD7")
    finished = store.for_load("LD7", statuses={Status.ACCEPTED, Status.FULLY_SIGNED})

    assert len(everything) == 3
    assert {r.kind for r in finished} == {Kind.RATE_CONFIRMATION, Kind.BILL_OF_LADING}
