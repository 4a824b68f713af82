from django.contrib import admin

from .models import Ground, OperatingHours


class OperatingHoursInline(admin.TabularInline):
    model = OperatingHours
    extra = 0
    max_num = 7


@admin.register(Ground)
class GroundAdmin(admin.ModelAdmin):
    list_display = (
        'id',
        'name',
        'city',
        'location',
        'category',
        'price_per_hour',
        'created_at',
    )
    search_fields = ('name', 'city', 'location')
    list_filter = ('city', 'category')
    inlines = (OperatingHoursInline,)

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        if not change:
            OperatingHours.objects.seed_defaults(form.instance)
