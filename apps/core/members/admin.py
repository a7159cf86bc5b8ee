from django.contrib import admin

from .models import Member


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'membership_category', 'status', 'account_balance', 'date_joined')
    list_filter = ('status', 'membership_category')
    search_fields = ('full_name', 'email', 'golf_australia_id')
    readonly_fields = ('account_balance', 'created_at', 'updated_at')
