from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DailyStockArchive',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(unique=True)),
                ('total_stock', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('available_stock', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('sold_stock', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('reserved_stock', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('subscription_demand', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('leftover_milk', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('closing_leftover', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Available stock at close, carried to the next day', max_digits=12)),
                ('archived_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'ordering': ['-date'],
            },
        ),
        migrations.CreateModel(
            name='DailyStockRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(unique=True)),
                ('total_stock', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('available_stock', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('sold_stock', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('reserved_stock', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('subscription_demand', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('leftover_milk', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Opening balance carried from the previous day', max_digits=12)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-date'],
            },
        ),
        migrations.CreateModel(
            name='MilkPricing',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('milk_type', models.CharField(max_length=30, unique=True)),
                ('price_per_liter', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'milk pricing',
                'ordering': ['milk_type'],
            },
        ),
        migrations.CreateModel(
            name='Farmer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('farmer_code', models.CharField(help_text='Short human-facing farmer ID (5 digits)', max_length=10, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('farm_name', models.CharField(blank=True, max_length=200, null=True)),
                ('farm_location', models.CharField(blank=True, max_length=200, null=True)),
                ('production_capacity', models.DecimalField(blank=True, decimal_places=2, help_text='Liters per day', max_digits=10, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('blocked', 'Blocked')], default='pending', max_length=20)),
                ('suspended_at', models.DateTimeField(blank=True, null=True)),
                ('suspension_reason', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='farmer_account', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['farmer_code'],
            },
        ),
        migrations.CreateModel(
            name='FarmerPayment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('notes', models.TextField(blank=True, null=True)),
                ('payment_date', models.DateField(default=django.utils.timezone.localdate)),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('review_notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('farmer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='milk_ledger.farmer')),
                ('reviewed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_farmer_payments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='MilkContribution',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('milk_type', models.CharField(default='cow', max_length=30)),
                ('quantity', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('submitted_quantity', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('quality_rating', models.PositiveSmallIntegerField(blank=True, choices=[(1, 'Grade A'), (2, 'Grade B'), (3, 'Substandard')], null=True)),
                ('decision', models.CharField(choices=[('admit', 'Admitted'), ('warn', 'Warned'), ('suspend', 'Suspended')], default='admit', max_length=10)),
                ('substandard_streak', models.PositiveSmallIntegerField(default=0)),
                ('contribution_date', models.DateField(default=django.utils.timezone.localdate)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('farmer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='contributions', to='milk_ledger.farmer')),
                ('payment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='contributions', to='milk_ledger.farmerpayment')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_milk_contributions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-contribution_date', '-created_at', '-id'],
                'indexes': [models.Index(fields=['farmer', 'contribution_date'], name='milk_contrib_farmer_date_idx')],
            },
        ),
        migrations.CreateModel(
            name='StockReservation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reservation_date', models.DateField()),
                ('reservation_type', models.CharField(choices=[('subscription', 'Subscription'), ('bulk_order', 'Bulk Order'), ('other', 'Other')], default='subscription', max_length=20)),
                ('reserved_amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('source_date', models.DateField(help_text='Day whose stock funds the reservation')),
                ('applied_at', models.DateTimeField(blank=True, help_text='When the archive run applied it to the opening balance', null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-reservation_date', 'reservation_type'],
                'unique_together': {('reservation_date', 'reservation_type')},
            },
        ),
        migrations.CreateModel(
            name='Subscription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('milk_type', models.CharField(default='cow', max_length=30)),
                ('quantity', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('frequency', models.CharField(choices=[('daily', 'Daily'), ('weekly', 'Weekly'), ('monthly', 'Monthly')], default='daily', max_length=10)),
                ('status', models.CharField(choices=[('active', 'Active'), ('cancelled', 'Cancelled')], default='active', max_length=10)),
                ('start_date', models.DateField(default=django.utils.timezone.localdate)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='milk_subscriptions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
