from django.urls import path
from . import views

urlpatterns = [
    path('grounds', views.ground_list, name='ground_list'),
    path('grounds/<int:ground_id>', views.ground_detail, name='ground_detail'),

    path('operating-hours/ground/<int:ground_id>', views.operating_hours_list, name='operating_hours_list'),
    path('operating-hours/ground/<int:ground_id>/day/<int:day>', views.operating_hours_day, name='operating_hours_day'),
    path('operating-hours/ground/<int:ground_id>/batch', views.operating_hours_batch, name='operating_hours_batch'),
]
