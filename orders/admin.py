from django.contrib import admin
from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'shop', 'client_name', 'product_name', 'quantity', 'total_amount', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('client_name', 'client_phone', 'product_name')
    readonly_fields = ('total_amount',)
