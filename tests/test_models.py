from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from documents.choices import Kind
from documents.models import Document

pytestmark = pytest.mark.django_db


def test_total_recomputed_on_save(rate_confirmation_factory):
    doc = rate_confirmation_factory(
        rate_amount=Decimal("15.00"),
        quantity=Decimal("20"),
        fuel_surcharge=Decimal("0"),
        dump_fee=Decimal("50.00"),
    )
    assert doc.total_amount == Decimal("350.00")

    doc.tolls = Decimal("25.50")
    doc.save()
    doc.refresh_from_db()
    assert doc.total_amount == Decimal("375.50")


def test_signing_documents_have_no_total(bol_factory):
    bol = bol_factory(rate_amount=Decimal("10"), quantity=Decimal("5"))
    assert bol.kind == Kind.BILL_OF_LADING
    assert bol.total_amount == 0


def test_negative_amounts_rejected(rate_confirmation_factory):
    doc = rate_confirmation_factory.build(rate_amount=Decimal("-1"), tolls=Decimal("-5"))
    with pytest.raises(ValidationError) as exc:
        doc.clean()
    assert set(exc.value.message_dict) == {"rate_amount", "tolls"}


def test_one_signature_per_role(rate_confirmation_factory, signature):
    from django.db import IntegrityError

    doc = rate_confirmation_factory()
    fields = dict(
        role="carrier",
        signer_name=signature.signer_name,
        image=signature.image_png,
        signed_at=signature.captured_at,
    )
    doc.signatures.create(**fields)
    with pytest.raises(IntegrityError):
        doc.signatures.create(**fields)


def test_str(rate_confirmation_factory):
    doc = rate_confirmation_factory(reference="RC-001")
    assert str(doc) == "RC-001 - Draft"
    assert Document.objects.get(reference="RC-001").version == 1
