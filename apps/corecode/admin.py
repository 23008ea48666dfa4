from django.contrib import admin

from .models import SiteConfig, UserLog


@admin.register(SiteConfig)
class SiteConfigAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'updated_at']
    search_fields = ['key']


@admin.register(UserLog)
class UserLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'user_email', 'action', 'details', 'ip_address']
    list_filter = ['action']
    search_fields = ['user_email', 'action', 'details']
    readonly_fields = ['user_email', 'action', 'details', 'ip_address', 'created_at']

    def has_add_permission(self, request):
        return False
