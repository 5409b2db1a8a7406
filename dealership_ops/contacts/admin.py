from django.contrib import admin
from .models import Contact


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ['display_name', 'contact_type', 'email', 'phone']
    search_fields = ['company_name', 'first_name', 'last_name', 'email']
    list_filter = ['contact_type']
