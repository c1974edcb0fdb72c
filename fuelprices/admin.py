from django.contrib import admin
from django.utils import timezone

from .models import PriceSubmission, Station


@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ['name', 'brand', 'city', 'state', 'latitude', 'longitude', 'is_home']
    list_filter = ['state', 'is_home']
    search_fields = ['name', 'brand', 'city', 'address']
    ordering = ['-is_home', 'name']
    list_per_page = 50

    fieldsets = (
        ('Station Information', {
            'fields': ('name', 'brand', 'address', 'city', 'state', 'is_home')
        }),
        ('Location', {
            'fields': ('latitude', 'longitude')
        }),
    )


def _review(queryset, new_status):
    return queryset.filter(status=PriceSubmission.STATUS_PENDING).update(
        status=new_status, reviewed_at=timezone.now()
    )


@admin.register(PriceSubmission)
class PriceSubmissionAdmin(admin.ModelAdmin):
    list_display = ['id', 'station', 'station_name', 'grade', 'price_cents', 'status', 'submitter_name', 'created_at', 'reviewed_at']
    list_filter = ['status', 'grade']
    search_fields = ['station__name', 'station_name', 'submitter_name', 'notes']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'submitter_ip']
    actions = ['approve', 'reject']
    list_per_page = 50

    @admin.action(description="Approve selected pending submissions")
    def approve(self, request, queryset):
        count = _review(queryset, PriceSubmission.STATUS_APPROVED)
        self.message_user(request, f"Approved {count} submission(s).")

    @admin.action(description="Reject selected pending submissions")
    def reject(self, request, queryset):
        count = _review(queryset, PriceSubmission.STATUS_REJECTED)
        self.message_user(request, f"Rejected {count} submission(s).")
