from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


STATUS_CHOICES = [('new', 'New'), ('waiting', 'Waiting'), ('received', 'Received'), ('problem', 'Problem'), ('blocked', 'Blocked')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('casinos', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PayPalAccount',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254)),
                ('password', models.CharField(max_length=255)),
                ('phone_number', models.CharField(max_length=32)),
                ('authenticator_url', models.CharField(max_length=500)),
                ('date_created', models.DateField(blank=True, null=True)),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('sender_paypal_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('balance_send', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('info', models.TextField(blank=True, default='')),
                ('currency', models.CharField(choices=[('USD', 'USD'), ('GBP', 'GBP'), ('EUR', 'EUR'), ('CAD', 'CAD')], default='GBP', max_length=3)),
                ('status', models.CharField(choices=[('active', 'Active'), ('blocked', 'Blocked'), ('limited', 'Limited'), ('inactive', 'Inactive')], db_index=True, default='active', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='paypal_accounts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'paypal_accounts',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='PayPalWork',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('casino_email', models.CharField(max_length=255)),
                ('casino_password', models.CharField(max_length=255)),
                ('deposit_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('status', models.CharField(choices=[('active', 'Active'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('blocked', 'Blocked')], db_index=True, default='active', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('junior', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='paypal_works', to=settings.AUTH_USER_MODEL)),
                ('paypal_account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='works', to='paypal.paypalaccount')),
                ('casino', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='paypal_works', to='casinos.casino')),
            ],
            options={
                'db_table': 'paypal_works',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='PayPalWithdrawal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('withdrawal_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('status', models.CharField(choices=STATUS_CHOICES, db_index=True, default='new', max_length=20)),
                ('manager_status', models.CharField(blank=True, choices=STATUS_CHOICES, max_length=20, null=True)),
                ('teamlead_status', models.CharField(blank=True, choices=STATUS_CHOICES, max_length=20, null=True)),
                ('comment', models.TextField(blank=True, default='')),
                ('manager_comment', models.TextField(blank=True, null=True)),
                ('teamlead_comment', models.TextField(blank=True, null=True)),
                ('hr_comment', models.TextField(blank=True, null=True)),
                ('cfo_comment', models.TextField(blank=True, null=True)),
                ('admin_comment', models.TextField(blank=True, null=True)),
                ('checked_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('work', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='withdrawals', to='paypal.paypalwork')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='paypal_withdrawals', to=settings.AUTH_USER_MODEL)),
                ('paypal_account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='withdrawals', to='paypal.paypalaccount')),
                ('casino', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='paypal_withdrawals', to='casinos.casino')),
                ('checked_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='paypal_withdrawals_checked', to=settings.AUTH_USER_MODEL)),
                ('checked_by_teamlead', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='paypal_withdrawals_checked_as_teamlead', to=settings.AUTH_USER_MODEL)),
                ('checked_by_hr', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='paypal_withdrawals_checked_as_hr', to=settings.AUTH_USER_MODEL)),
                ('checked_by_cfo', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='paypal_withdrawals_checked_as_cfo', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'paypal_withdrawals',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
