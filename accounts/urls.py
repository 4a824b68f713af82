from django.urls import path
from . import views

urlpatterns = [
    path('auth/me', views.me, name='auth_me'),
    path('profile', views.profile, name='profile'),

    path('admin/admins', views.admin_users, name='admin_users'),
    path('admin/admins/<int:admin_id>', views.admin_user_detail, name='admin_user_detail'),
]
