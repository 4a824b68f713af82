from django.contrib import admin

from .models import AdminUser, UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user_uid', 'name', 'phone', 'updated_at')
    search_fields = ('user_uid', 'name', 'phone')


@admin.register(AdminUser)
class AdminUserAdmin(admin.ModelAdmin):
    list_display = ('id', 'email', 'name', 'created_by', 'created_at')
    search_fields = ('email', 'name')
