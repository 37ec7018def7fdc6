from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('paypal', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PayPalOperation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('operation_type', models.CharField(choices=[('send_money', 'Send money'), ('receive_money', 'Receive money'), ('withdraw_to_card', 'Withdraw to card'), ('deposit_from_card', 'Deposit from card'), ('casino_deposit', 'Casino deposit'), ('casino_withdrawal', 'Casino withdrawal')], max_length=30)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('currency', models.CharField(choices=[('USD', 'USD'), ('GBP', 'GBP'), ('EUR', 'EUR'), ('CAD', 'CAD')], default='USD', max_length=3)),
                ('recipient_paypal_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('recipient_card_number', models.CharField(blank=True, max_length=32, null=True)),
                ('casino_name', models.CharField(blank=True, max_length=255, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('processing', 'Processing'), ('completed', 'Completed'), ('failed', 'Failed'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('description', models.TextField(blank=True, null=True)),
                ('transaction_id', models.CharField(blank=True, max_length=255, null=True)),
                ('fee_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('paypal_account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='operations', to='paypal.paypalaccount')),
                ('junior', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='paypal_operations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'paypal_operations',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
