from django.contrib import admin
from .models import Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ['brand', 'model', 'license_number', 'lifecycle_status', 'sale_channel', 'location', 'selling_price', 'sold_at', 'delivered_at']
    search_fields = ['brand', 'model', 'license_number', 'vin']
    list_filter = ['lifecycle_status', 'location', 'import_status']
    autocomplete_fields = ['customer', 'supplier', 'transporter']
    # Lifecycle fields are written by the reconciliation service only
    readonly_fields = ['lifecycle_status', 'sold_at', 'delivered_at', 'purchased_at', 'version', 'created_at', 'updated_at']

    fields = (
        'brand', 'model', 'year', 'color', 'license_number', 'vin', 'mileage',
        'purchase_price', 'selling_price', 'import_status', 'location', 'lifecycle_status',
        'customer', 'supplier', 'transporter', 'purchaser', 'salesperson',
        'sold_at', 'delivered_at', 'purchased_at', 'details',
        'version', 'created_at', 'updated_at'
    )
