from django.db import models

from dealership_ops.contacts.models import Contact
from dealership_ops.inventory.models import Vehicle

AVAILABLE = 'available'
ON_LOAN = 'on_loan'

PENDING = 'pending'
IN_PROGRESS = 'in_progress'
RESOLVED = 'resolved'
VOID = 'void'

OPEN_CLAIM_STATUSES = (PENDING, IN_PROGRESS)
CLOSED_CLAIM_STATUSES = (RESOLVED, VOID)


class LoanCar(models.Model):
    STATUS_CHOICES = [
        (AVAILABLE, 'Available'),
        (ON_LOAN, 'On loan'),
    ]

    vehicle = models.OneToOneField(Vehicle, on_delete=models.PROTECT, related_name='loan_car')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=AVAILABLE, db_index=True)
    # assignment metadata, cleared on release
    customer = models.ForeignKey(Contact, on_delete=models.SET_NULL, null=True, blank=True, related_name='loan_cars')
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Loan Car'
        verbose_name_plural = 'Loan Cars'

    def __str__(self):
        return f"Loan car {self.vehicle} ({self.status})"


class WarrantyClaim(models.Model):
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (IN_PROGRESS, 'In progress'),
        (RESOLVED, 'Resolved'),
        (VOID, 'Void'),
    ]
    PRIORITIES = [
        ('laag', 'Low'),
        ('normaal', 'Normal'),
        ('hoog', 'High'),
    ]

    vehicle = models.ForeignKey(Vehicle, on_delete=models.SET_NULL, null=True, blank=True, related_name='warranty_claims')
    # for vehicles that are not in our own records
    manual_vehicle_brand = models.CharField(max_length=100, blank=True, default='')
    manual_vehicle_model = models.CharField(max_length=100, blank=True, default='')
    manual_license_number = models.CharField(max_length=20, blank=True, default='')
    manual_customer_name = models.CharField(max_length=200, blank=True, default='')
    manual_customer_phone = models.CharField(max_length=50, blank=True, default='')

    description = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    priority = models.CharField(max_length=10, choices=PRIORITIES, default='normaal')
    estimated_cost = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    actual_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    loan_car = models.ForeignKey(LoanCar, on_delete=models.SET_NULL, null=True, blank=True, related_name='claims')
    loan_car_assigned = models.BooleanField(default=False)

    resolution_date = models.DateTimeField(null=True, blank=True)
    resolution_description = models.TextField(blank=True, default='')
    customer_satisfaction = models.PositiveSmallIntegerField(null=True, blank=True)  # 1-5 scale
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Warranty Claim'
        verbose_name_plural = 'Warranty Claims'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(status=RESOLVED) | models.Q(actual_cost__isnull=True),
                name='warrantyclaim_actual_cost_only_when_resolved',
            ),
            models.CheckConstraint(
                condition=models.Q(customer_satisfaction__isnull=True)
                | models.Q(customer_satisfaction__gte=1, customer_satisfaction__lte=5),
                name='warrantyclaim_satisfaction_valid_range',
            ),
            models.UniqueConstraint(
                fields=['loan_car'],
                condition=models.Q(loan_car_assigned=True, status__in=OPEN_CLAIM_STATUSES),
                name='unique_open_claim_per_loan_car',
            ),
        ]

    @property
    def is_closed(self):
        return self.status in CLOSED_CLAIM_STATUSES

    def __str__(self):
        vehicle = self.vehicle or self.manual_license_number or "unknown vehicle"
        return f"Warranty claim #{self.pk} for {vehicle} ({self.status})"
