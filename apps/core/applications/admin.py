from django.contrib import admin

from .models import MembershipApplication


@admin.register(MembershipApplication)
class MembershipApplicationAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'email', 'membership_category', 'status', 'estimated_total_cost', 'created_at')
    list_filter = ('status', 'membership_category')
    search_fields = ('full_name', 'email')
    readonly_fields = (
        'estimated_pro_rata_fee',
        'estimated_joining_fee',
        'estimated_total_cost',
        'estimated_on',
        'email_verified_at',
        'approved_by',
        'approved_at',
        'rejected_by',
        'rejected_at',
        'member',
        'created_at',
        'updated_at',
    )
