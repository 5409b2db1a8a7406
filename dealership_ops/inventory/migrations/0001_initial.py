import django.core.serializers.json
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('contacts', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('brand', models.CharField(db_index=True, max_length=100)),
                ('model', models.CharField(db_index=True, max_length=100)),
                ('year', models.PositiveIntegerField(blank=True, null=True)),
                ('color', models.CharField(blank=True, default='', max_length=50)),
                ('license_number', models.CharField(blank=True, db_index=True, default='', max_length=20)),
                ('vin', models.CharField(blank=True, db_index=True, default='', max_length=17)),
                ('mileage', models.PositiveIntegerField(blank=True, null=True)),
                ('purchase_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('selling_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('import_status', models.CharField(choices=[('niet_aangemeld', 'Not registered'), ('aangemeld', 'Registered'), ('goedgekeurd', 'Approved'), ('bpm_betaald', 'BPM paid'), ('ingeschreven', 'Enrolled')], default='niet_aangemeld', max_length=20)),
                ('location', models.CharField(choices=[('showroom', 'Showroom'), ('opslag', 'Storage'), ('calandstraat', 'Calandstraat'), ('werkplaats', 'Workshop'), ('poetser', 'Detailer'), ('spuiter', 'Paint shop'), ('in_transit', 'In transit'), ('oud_beijerland', 'Oud-Beijerland'), ('afgeleverd', 'Delivered')], db_index=True, default='showroom', max_length=20)),
                ('lifecycle_status', models.CharField(choices=[('voorraad', 'In stock'), ('in_transit', 'In transit'), ('verkocht_b2b', 'Sold B2B'), ('verkocht_b2c', 'Sold B2C'), ('afgeleverd', 'Delivered'), ('leenauto', 'Loan car')], db_index=True, default='voorraad', max_length=20)),
                ('sold_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('purchased_at', models.DateTimeField(blank=True, null=True)),
                ('details', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('version', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='purchased_vehicles', to='contacts.contact')),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='supplied_vehicles', to='contacts.contact')),
                ('transporter', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transported_vehicles', to='contacts.contact')),
                ('purchaser', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='purchased_vehicles', to=settings.AUTH_USER_MODEL)),
                ('salesperson', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sold_vehicles', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Vehicle',
                'verbose_name_plural': 'Vehicles',
                'ordering': ['-created_at'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('purchase_price__isnull', True), ('purchase_price__gte', 0), _connector='OR'), name='vehicle_purchase_price_non_negative'),
                    models.CheckConstraint(condition=models.Q(('selling_price__isnull', True), ('selling_price__gte', 0), _connector='OR'), name='vehicle_selling_price_non_negative'),
                ],
            },
        ),
    ]
