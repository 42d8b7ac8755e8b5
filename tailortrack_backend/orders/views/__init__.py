from .admin_orders import AdminOrderViewSet
from .orders import OrderViewSet
from .tracking import TrackOrderView, TrackSearchView

__all__ = ["AdminOrderViewSet", "OrderViewSet", "TrackOrderView", "TrackSearchView"]
