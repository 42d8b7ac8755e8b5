from .order import Order
from .status_history import OrderStatusHistory

__all__ = ["Order", "OrderStatusHistory"]
