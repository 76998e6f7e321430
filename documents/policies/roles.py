def _role(user):
    return getattr(user, "role", None)


def is_broker(user) -> bool:
    return _role(user) == "broker"


def is_admin(user) -> bool:
    return _role(user) == "admin" or getattr(user, "is_superuser", False)


def is_customer(user) -> bool:
    return _role(user) == "customer"


def is_carrier(user) -> bool:
    return _role(user) == "carrier"


def is_shipper(user) -> bool:
    return _role(user) == "shipper"


def is_driver(user) -> bool:
    return _role(user) == "driver"


def is_receiver(user) -> bool:
    return _role(user) == "receiver"
