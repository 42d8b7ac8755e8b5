# notifications/urls.py

from django.urls import path

from notifications.views import (
    BroadcastView,
    MarkAllReadView,
    NotificationDeleteView,
    NotificationListView,
    NotificationReadView,
    UnreadCountView,
)

app_name = "notifications"

urlpatterns = [
    path("", NotificationListView.as_view(), name="list"),
    path("unread-count/", UnreadCountView.as_view(), name="unread-count"),
    path("mark-all-read/", MarkAllReadView.as_view(), name="mark-all-read"),
    path("broadcast/", BroadcastView.as_view(), name="broadcast"),
    path("<uuid:pk>/read/", NotificationReadView.as_view(), name="read"),
    path("<uuid:pk>/", NotificationDeleteView.as_view(), name="delete"),
]
