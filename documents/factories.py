"""Factories for generating demo/test data with factory_boy and Faker.

Use sequences for unique identifiers and Faker for descriptive fields.
Documents are created in their initial status; use the lifecycle service
to move them forward so versions and milestones stay consistent.
"""

import random
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from factory import Faker
from factory.django import DjangoModelFactory

from documents.choices import Kind, Status
from documents.models import Document
from documents.services.signature_capture import SignaturePad


class UserFactory(DjangoModelFactory):
    class Meta:
        model = get_user_model()
        django_get_or_create = ("username",)

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@example.com")
    first_name = Faker("first_name")
    last_name = Faker("last_name")
    company_name = Faker("company")
    role = "broker"
    is_active = True

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        password = kwargs.pop("password", "password123")
        user = super()._create(model_class, *args, **kwargs)
        user.set_password(password)
        user.save()
        return user


class RateConfirmationFactory(DjangoModelFactory):
    class Meta:
        model = Document
        django_get_or_create = ("reference",)

    reference = factory.Sequence(lambda n: f"RC-{n:06d}")
    kind = Kind.RATE_CONFIRMATION
    status = Status.DRAFT
    load_ref = factory.Sequence(lambda n: f"LD{1000 + n}")
    rate_amount = factory.LazyFunction(
        lambda: Decimal(random.randint(800, 2500)) / 100
    )
    quantity = factory.LazyFunction(lambda: Decimal(random.randint(10, 40)))
    quantity_unit = "tons"
    fuel_surcharge = factory.LazyFunction(lambda: Decimal(random.randint(0, 150)))
    details = factory.LazyAttribute(
        lambda obj: {
            "customer_name": obj.customer_name,
            "carrier_name": obj.carrier_name,
            "commodity": obj.commodity,
        }
    )
    created_by = factory.SubFactory(UserFactory)

    class Params:
        customer_name = Faker("company")
        carrier_name = Faker("company")
        commodity = factory.LazyFunction(
            lambda: random.choice(["Gravel", "Sand", "Topsoil", "Limestone"])
        )


class BillOfLadingFactory(DjangoModelFactory):
    class Meta:
        model = Document
        django_get_or_create = ("reference",)

    load_ref = factory.Sequence(lambda n: f"LD{5000 + n}")
    reference = factory.LazyAttribute(lambda obj: f"BOL-{obj.load_ref}")
    kind = Kind.BILL_OF_LADING
    status = Status.UNSIGNED
    details = factory.LazyAttribute(
        lambda obj: {
            "shipper_name": obj.shipper_name,
            "consignee_name": obj.consignee_name,
        }
    )

    class Params:
        shipper_name = Faker("company")
        consignee_name = Faker("company")


class ProofOfDeliveryFactory(BillOfLadingFactory):
    load_ref = factory.Sequence(lambda n: f"LD{8000 + n}")
    reference = factory.LazyAttribute(lambda obj: f"POD-{obj.load_ref}")
    kind = Kind.PROOF_OF_DELIVERY
    details = factory.LazyAttribute(
        lambda obj: {"consignee_name": obj.consignee_name}
    )


def signature_for(name, strokes=None, **kwargs):
    """A submitted Signature with a short scribble unless strokes are given."""
    pad = SignaturePad()
    pad.name = name
    for stroke in strokes or [[(20, 100), (80, 40), (140, 110), (220, 60)]]:
        pad.add_stroke(stroke)
    return pad.submit(**kwargs)
