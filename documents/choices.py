"""
Closed vocabularies for load paperwork.

Django's TextChoices double as plain ``str`` enums, so the lifecycle code
can use them without touching the database and the models can store them
as CharField choices.
"""

from django.db import models


class Kind(models.TextChoices):
    RATE_CONFIRMATION = "rate_confirmation", "Rate Confirmation"
    BILL_OF_LADING = "bill_of_lading", "Bill of Lading"
    PROOF_OF_DELIVERY = "proof_of_delivery", "Proof of Delivery"


class Status(models.TextChoices):
    # Rate confirmation
    DRAFT = "draft", "Draft"
    SENT = "sent", "Sent"
    SIGNED = "signed", "Signed"
    ACCEPTED = "accepted", "Accepted"
    # BOL / POD
    UNSIGNED = "unsigned", "Unsigned"
    SHIPPER_SIGNED = "shipper_signed", "Shipper Signed"
    RECEIVER_SIGNED = "receiver_signed", "Receiver Signed"
    DRIVER_SIGNED = "driver_signed", "Driver Signed"
    FULLY_SIGNED = "fully_signed", "Fully Signed"


class Action(models.TextChoices):
    SEND = "send", "Send"
    CUSTOMER_SIGN = "customer_sign", "Customer Sign"
    CARRIER_SIGN = "carrier_sign", "Carrier Sign"
    ACCEPT = "accept", "Accept & Confirm Load"
    SHIPPER_SIGN = "shipper_sign", "Shipper Sign"
    DRIVER_SIGN = "driver_sign", "Driver Sign"
    RECEIVER_SIGN = "receiver_sign", "Receiver Sign"


class SignerRole(models.TextChoices):
    CUSTOMER = "customer", "Customer"
    CARRIER = "carrier", "Carrier"
    SHIPPER = "shipper", "Shipper"
    DRIVER = "driver", "Driver"
    RECEIVER = "receiver", "Receiver"


class DeliveryCondition(models.TextChoices):
    GOOD = "good", "Good"
    DAMAGED = "damaged", "Damaged"
    SHORT = "short", "Short"
    REFUSED = "refused", "Refused"


class AccessorialType(models.TextChoices):
    """Fixed fee set added on top of rate x quantity.

    Values double as Document field names.
    """

    FUEL_SURCHARGE = "fuel_surcharge", "Fuel Surcharge"
    DUMP_FEE = "dump_fee", "Dump Fee"
    TOLLS = "tolls", "Tolls"
    DETENTION = "detention", "Detention"
    LAYOVER = "layover", "Layover"
    STOP_OFF = "stop_off", "Stop-off"


TERMINAL_STATUSES = frozenset({Status.ACCEPTED, Status.FULLY_SIGNED})
