from django.contrib import admin

from .models import Booking, BookingActivityLog


class BookingActivityInline(admin.TabularInline):
    model = BookingActivityLog
    extra = 0
    can_delete = False
    readonly_fields = ('action', 'performed_by', 'timestamp')


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        'id',
        'ground',
        'date',
        'slot',
        'customer_name',
        'customer_phone',
        'price_at_booking',
        'status',
    )

    search_fields = (
        'customer_name',
        'customer_phone',
        'user_uid',
        'ground__name',
    )

    list_filter = ('status', 'ground')
    date_hierarchy = 'date'
    readonly_fields = ('price_at_booking', 'created_at', 'cancelled_at')
    inlines = (BookingActivityInline,)

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(BookingActivityLog)
class BookingActivityLogAdmin(admin.ModelAdmin):
    list_display = (
        'timestamp',
        'performed_by',
        'action',
        'booking',
    )

    search_fields = (
        'performed_by',
        'booking__id',
    )

    list_filter = ('action',)
    readonly_fields = ('timestamp',)
