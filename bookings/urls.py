from django.urls import path
from . import views

urlpatterns = [
    path('grounds/<int:ground_id>/availability', views.ground_availability, name='ground_availability'),

    path('bookings', views.bookings, name='bookings'),
    path('bookings/mine', views.my_bookings, name='my_bookings'),
    path('bookings/<int:booking_id>', views.cancel_booking, name='cancel_booking'),
]
