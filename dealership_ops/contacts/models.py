from django.db import models


class Contact(models.Model):
    CONTACT_TYPES = [
        ('customer', 'Customer'),
        ('supplier', 'Supplier'),
        ('transporter', 'Transporter'),
    ]

    contact_type = models.CharField(max_length=20, choices=CONTACT_TYPES, default='customer', db_index=True)
    first_name = models.CharField(max_length=100, blank=True, default='')
    last_name = models.CharField(max_length=100, blank=True, default='')
    company_name = models.CharField(max_length=200, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    phone = models.CharField(max_length=50, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['company_name', 'last_name', 'first_name']
        verbose_name = 'Contact'
        verbose_name_plural = 'Contacts'

    @property
    def display_name(self):
        return self.company_name or f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return f"{self.display_name} ({self.contact_type})"
