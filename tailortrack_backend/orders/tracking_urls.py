# orders/tracking_urls.py

from django.urls import path

from orders.views import TrackOrderView, TrackSearchView

urlpatterns = [
    # search/ first so it is never read as a barcode
    path("search/", TrackSearchView.as_view(), name="track-search"),
    path("<str:barcode>/", TrackOrderView.as_view(), name="track-order"),
]
