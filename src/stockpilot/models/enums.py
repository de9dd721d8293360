"""
Enums for domain models.
Enums provide type safety and clarity. Validation for categorical fields.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""

    ADMIN = "ADMIN"
    STAFF = "STAFF"


class ItemKind(str, enum.Enum):
    """Which catalog a stock-tracked item belongs to."""

    PRODUCT = "product"
    MATERIAL = "material"


class DeliveryStatus(str, enum.Enum):
    """Delivery record lifecycle. CONFIRMED is terminal."""

    PENDING = "pending"
    CONFIRMED = "confirmed"


class PaymentMethod(str, enum.Enum):
    """Stored payment methods for POS orders."""

    CASH = "cash"
    GCASH = "gcash"
    GRABFOOD = "grabfood"
    FOODPANDA = "foodpanda"


class OrderStatus(str, enum.Enum):
    """Order line status."""

    COMPLETED = "completed"
