from django.contrib import admin
from .models import Shop


@admin.register(Shop)
class ShopAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'owner', 'activity', 'city', 'theme', 'created_at')
    list_filter = ('theme',)
    search_fields = ('name', 'slug', 'owner__email', 'city')
