from django.urls import path

from .api import (
    cancellation_requests_api,
    create_booking_api,
    my_bookings_api,
    reset_week_api,
    resolve_cancellation_api,
    week_api,
)


app_name = "reservations"

urlpatterns = [
    path("api/week/", week_api, name="week_api"),
    path("api/week/reset/", reset_week_api, name="reset_week_api"),
    path("api/bookings/", create_booking_api, name="create_booking_api"),
    path("api/bookings/mine/", my_bookings_api, name="my_bookings_api"),
    path("api/cancellation-requests/", cancellation_requests_api, name="cancellation_requests_api"),
    path(
        "api/cancellation-requests/<int:request_id>/resolve/",
        resolve_cancellation_api,
        name="resolve_cancellation_api",
    ),
]
