"""Seed demo paperwork: users per role plus rate confirmations, BOLs and PODs."""

import random

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from factory import random as factory_random
from faker import Faker

from documents import factories
from documents.choices import Action, DeliveryCondition
from documents.records import DeliveryReceipt
from documents.services.lifecycle import perform_action

ROLES = ["broker", "customer", "carrier", "shipper", "driver", "receiver"]


class Command(BaseCommand):
    help = "Seed demo rate confirmations, BOLs and PODs at assorted lifecycle stages"

    def add_arguments(self, parser):
        parser.add_argument("--loads", type=int, default=5)
        parser.add_argument(
            "--seed", type=int, default=None, help="Seed for Faker/random"
        )

    @transaction.atomic
    def handle(self, *args, **options):
        seed = options.get("seed")
        if seed is not None:
            random.seed(seed)
            factory_random.reseed_random(seed)
            Faker.seed(seed)
            self.stdout.write(self.style.NOTICE(f"Seeding randomness with seed={seed}"))

        users = {role: self._get_or_create_user(f"demo_{role}", role) for role in ROLES}
        self.stdout.write(
            self.style.SUCCESS("Using users: " + ", ".join(u.username for u in users.values()))
        )

        loads = options["loads"]
        self.stdout.write("Creating paperwork...")
        for _ in range(loads):
            rc = factories.RateConfirmationFactory(created_by=users["broker"])
            load_ref = rc.load_ref
            bol = factories.BillOfLadingFactory(load_ref=load_ref, created_by=users["broker"])
            pod = factories.ProofOfDeliveryFactory(load_ref=load_ref, created_by=users["broker"])

            # Advance each load a random distance through its lifecycle
            stage = random.randint(0, 4)
            if stage >= 1:
                self._act(rc.reference, Action.SEND, users["broker"])
            if stage >= 2:
                self._sign(rc.reference, Action.CUSTOMER_SIGN, users["customer"])
                self._sign(rc.reference, Action.CARRIER_SIGN, users["carrier"])
            if stage >= 3:
                self._act(rc.reference, Action.ACCEPT, users["broker"])
                self._sign(bol.reference, Action.SHIPPER_SIGN, users["shipper"])
                self._sign(bol.reference, Action.DRIVER_SIGN, users["driver"])
            if stage >= 4:
                self._sign(
                    pod.reference,
                    Action.RECEIVER_SIGN,
                    users["receiver"],
                    delivery=DeliveryReceipt(
                        actual_quantity=str(rc.quantity),
                        condition=DeliveryCondition.GOOD,
                    ),
                )
                self._sign(pod.reference, Action.DRIVER_SIGN, users["driver"])

        self.stdout.write(self.style.SUCCESS("Seed complete."))
        self.stdout.write(
            self.style.SUCCESS(
                f"Rate Confirmations: {loads}, BOLs: {loads}, PODs: {loads}"
            )
        )

    def _act(self, reference, action, user, **kwargs):
        return perform_action(reference, action, actor=user, **kwargs)

    def _sign(self, reference, action, user, **kwargs):
        signature = factories.signature_for(user.display_name)
        return self._act(reference, action, user, signature=signature, **kwargs)

    def _get_or_create_user(self, username: str, role: str):
        User = get_user_model()
        user, created = User.objects.get_or_create(
            username=username,
            defaults={
                "email": f"{username}@example.com",
                "role": role,
                "first_name": role.capitalize(),
                "last_name": "Demo",
            },
        )
        if created:
            user.set_password("password123")
            user.save()
        return user
