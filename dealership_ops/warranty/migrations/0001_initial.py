import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('contacts', '0001_initial'),
        ('inventory', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='LoanCar',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('available', 'Available'), ('on_loan', 'On loan')], db_index=True, default='available', max_length=20)),
                ('start_date', models.DateTimeField(blank=True, null=True)),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='loan_cars', to='contacts.contact')),
                ('vehicle', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='loan_car', to='inventory.vehicle')),
            ],
            options={
                'verbose_name': 'Loan Car',
                'verbose_name_plural': 'Loan Cars',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='WarrantyClaim',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('manual_vehicle_brand', models.CharField(blank=True, default='', max_length=100)),
                ('manual_vehicle_model', models.CharField(blank=True, default='', max_length=100)),
                ('manual_license_number', models.CharField(blank=True, default='', max_length=20)),
                ('manual_customer_name', models.CharField(blank=True, default='', max_length=200)),
                ('manual_customer_phone', models.CharField(blank=True, default='', max_length=50)),
                ('description', models.TextField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In progress'), ('resolved', 'Resolved'), ('void', 'Void')], db_index=True, default='pending', max_length=20)),
                ('priority', models.CharField(choices=[('laag', 'Low'), ('normaal', 'Normal'), ('hoog', 'High')], default='normaal', max_length=10)),
                ('estimated_cost', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('actual_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('loan_car_assigned', models.BooleanField(default=False)),
                ('resolution_date', models.DateTimeField(blank=True, null=True)),
                ('resolution_description', models.TextField(blank=True, default='')),
                ('customer_satisfaction', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('loan_car', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='claims', to='warranty.loancar')),
                ('vehicle', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='warranty_claims', to='inventory.vehicle')),
            ],
            options={
                'verbose_name': 'Warranty Claim',
                'verbose_name_plural': 'Warranty Claims',
                'ordering': ['-created_at'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('status', 'resolved'), ('actual_cost__isnull', True), _connector='OR'), name='warrantyclaim_actual_cost_only_when_resolved'),
                    models.CheckConstraint(condition=models.Q(('customer_satisfaction__isnull', True), models.Q(('customer_satisfaction__gte', 1), ('customer_satisfaction__lte', 5)), _connector='OR'), name='warrantyclaim_satisfaction_valid_range'),
                    models.UniqueConstraint(condition=models.Q(('loan_car_assigned', True), ('status__in', ('pending', 'in_progress'))), fields=('loan_car',), name='unique_open_claim_per_loan_car'),
                ],
            },
        ),
    ]
