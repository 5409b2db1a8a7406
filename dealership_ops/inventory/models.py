from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from dealership_ops.contacts.models import Contact

VOORRAAD = 'voorraad'
IN_TRANSIT = 'in_transit'
VERKOCHT_B2B = 'verkocht_b2b'
VERKOCHT_B2C = 'verkocht_b2c'
AFGELEVERD = 'afgeleverd'
LEENAUTO = 'leenauto'

SOLD_STATUSES = frozenset({VERKOCHT_B2B, VERKOCHT_B2C})
SOLD_OR_DELIVERED = frozenset({VERKOCHT_B2B, VERKOCHT_B2C, AFGELEVERD})


class Vehicle(models.Model):
    LIFECYCLE_STATUSES = [
        (VOORRAAD, 'In stock'),
        (IN_TRANSIT, 'In transit'),
        (VERKOCHT_B2B, 'Sold B2B'),
        (VERKOCHT_B2C, 'Sold B2C'),
        (AFGELEVERD, 'Delivered'),
        (LEENAUTO, 'Loan car'),
    ]
    IMPORT_STATUSES = [
        ('niet_aangemeld', 'Not registered'),
        ('aangemeld', 'Registered'),
        ('goedgekeurd', 'Approved'),
        ('bpm_betaald', 'BPM paid'),
        ('ingeschreven', 'Enrolled'),
    ]
    LOCATIONS = [
        ('showroom', 'Showroom'),
        ('opslag', 'Storage'),
        ('calandstraat', 'Calandstraat'),
        ('werkplaats', 'Workshop'),
        ('poetser', 'Detailer'),
        ('spuiter', 'Paint shop'),
        ('in_transit', 'In transit'),
        ('oud_beijerland', 'Oud-Beijerland'),
        ('afgeleverd', 'Delivered'),
    ]

    # core fields
    brand = models.CharField(max_length=100, db_index=True)
    model = models.CharField(max_length=100, db_index=True)
    year = models.PositiveIntegerField(null=True, blank=True)
    color = models.CharField(max_length=50, blank=True, default='')
    license_number = models.CharField(max_length=20, blank=True, default='', db_index=True)
    vin = models.CharField(max_length=17, blank=True, default='', db_index=True)
    mileage = models.PositiveIntegerField(null=True, blank=True)
    purchase_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    selling_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    import_status = models.CharField(max_length=20, choices=IMPORT_STATUSES, default='niet_aangemeld')
    location = models.CharField(max_length=20, choices=LOCATIONS, default='showroom', db_index=True)
    lifecycle_status = models.CharField(max_length=20, choices=LIFECYCLE_STATUSES, default=VOORRAAD, db_index=True)

    # relations
    customer = models.ForeignKey(Contact, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchased_vehicles')
    supplier = models.ForeignKey(Contact, on_delete=models.SET_NULL, null=True, blank=True, related_name='supplied_vehicles')
    transporter = models.ForeignKey(Contact, on_delete=models.SET_NULL, null=True, blank=True, related_name='transported_vehicles')
    purchaser = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchased_vehicles')
    salesperson = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='sold_vehicles')

    # lifecycle timestamps, each written once
    sold_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    purchased_at = models.DateTimeField(null=True, blank=True)

    # Extension map: secondary metadata mirrored 1:1 into one JSON column
    details = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.brand} {self.model} ({self.license_number or self.vin or self.pk})"

    @property
    def sale_channel(self):
        return (self.details or {}).get('saleChannel')

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Vehicle'
        verbose_name_plural = 'Vehicles'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(purchase_price__isnull=True) | models.Q(purchase_price__gte=0),
                name='vehicle_purchase_price_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(selling_price__isnull=True) | models.Q(selling_price__gte=0),
                name='vehicle_selling_price_non_negative',
            ),
        ]
