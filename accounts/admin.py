from django.contrib import admin
from .models import User, WhatsAppVerification


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'phone', 'phone_verified_at', 'is_active', 'created_at')
    search_fields = ('email', 'name', 'phone')


admin.site.register(WhatsAppVerification)
