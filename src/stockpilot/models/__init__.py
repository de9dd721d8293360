"""Domain models package."""

from stockpilot.models.category import Category
from stockpilot.models.delivery import Delivery
from stockpilot.models.enums import DeliveryStatus, ItemKind, OrderStatus, PaymentMethod, UserRole
from stockpilot.models.expense import Expense
from stockpilot.models.inventory_material import InventoryMaterial
from stockpilot.models.inventory_used import InventoryUsed
from stockpilot.models.order import Order
from stockpilot.models.product import Product
from stockpilot.models.product_sold import ProductSold
from stockpilot.models.summary import Summary
from stockpilot.models.user import User

__all__ = [
    "Category",
    "Delivery",
    "DeliveryStatus",
    "Expense",
    "InventoryMaterial",
    "InventoryUsed",
    "ItemKind",
    "Order",
    "OrderStatus",
    "PaymentMethod",
    "Product",
    "ProductSold",
    "Summary",
    "User",
    "UserRole",
]
