from django.contrib import admin
from .models import LoanCar, WarrantyClaim


@admin.register(LoanCar)
class LoanCarAdmin(admin.ModelAdmin):
    list_display = ['vehicle', 'status', 'customer', 'start_date', 'end_date']
    search_fields = ['vehicle__brand', 'vehicle__model', 'vehicle__license_number']
    list_filter = ['status']
    readonly_fields = ['status', 'customer', 'start_date', 'end_date', 'created_at', 'updated_at']


@admin.register(WarrantyClaim)
class WarrantyClaimAdmin(admin.ModelAdmin):
    list_display = ['id', 'vehicle', 'manual_license_number', 'status', 'priority', 'estimated_cost', 'actual_cost', 'loan_car']
    search_fields = ['description', 'manual_license_number', 'vehicle__license_number']
    list_filter = ['status', 'priority', 'loan_car_assigned']
    # Lifecycle fields change through ClaimService only
    readonly_fields = [
        'status', 'actual_cost', 'loan_car', 'loan_car_assigned',
        'resolution_date', 'resolution_description', 'created_at', 'updated_at',
    ]
