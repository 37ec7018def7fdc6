from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


CURRENCIES = [('USD', 'USD'), ('GBP', 'GBP'), ('EUR', 'EUR'), ('CAD', 'CAD')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Bank',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('is_active', models.BooleanField(default=True, help_text='Set to False instead of deleting.')),
                ('name', models.CharField(help_text='Bank name', max_length=255, unique=True)),
                ('country', models.CharField(blank=True, max_length=100, null=True)),
                ('currency', models.CharField(choices=CURRENCIES, default='USD', max_length=3)),
                ('notes', models.TextField(blank=True, default='')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cash_management_bank_created', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last updated this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cash_management_bank_updated', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Bank',
                'verbose_name_plural': 'Banks',
                'db_table': 'banks',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='BankAccount',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('is_active', models.BooleanField(default=True, help_text='Set to False instead of deleting.')),
                ('holder_name', models.CharField(help_text='Name on the account', max_length=255)),
                ('account_number', models.CharField(blank=True, max_length=64, null=True)),
                ('sort_code', models.CharField(blank=True, max_length=32, null=True)),
                ('bank_url', models.CharField(blank=True, max_length=500, null=True)),
                ('login_password', models.CharField(blank=True, max_length=255, null=True)),
                ('currency', models.CharField(choices=CURRENCIES, default='USD', max_length=3)),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('balance_updated_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, default='')),
                ('bank', models.ForeignKey(help_text='Bank where the account is held', on_delete=django.db.models.deletion.CASCADE, related_name='accounts', to='cash_management.bank')),
                ('balance_updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='balances_updated', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cash_management_bankaccount_created', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last updated this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cash_management_bankaccount_updated', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Bank Account',
                'verbose_name_plural': 'Bank Accounts',
                'db_table': 'bank_accounts',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='BankBalanceHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_balance', models.DecimalField(decimal_places=2, max_digits=14)),
                ('new_balance', models.DecimalField(decimal_places=2, max_digits=14)),
                ('change_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('change_reason', models.TextField(blank=True, default='')),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('bank_account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='balance_history', to='cash_management.bankaccount')),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='balance_changes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'bank_balance_history',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Card',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('card_number_mask', models.CharField(max_length=32, unique=True)),
                ('card_bin', models.CharField(max_length=8)),
                ('card_type', models.CharField(choices=[('grey', 'Grey'), ('pink', 'Pink')], default='grey', max_length=10)),
                ('exp_month', models.PositiveSmallIntegerField()),
                ('exp_year', models.PositiveSmallIntegerField()),
                ('status', models.CharField(choices=[('active', 'Active'), ('low_balance', 'Low Balance'), ('blocked', 'Blocked'), ('inactive', 'Inactive')], db_index=True, default='active', max_length=20)),
                ('daily_limit', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('assigned_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('bank_account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cards', to='cash_management.bankaccount')),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_cards', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'cards',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='CardSecret',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('pan', models.CharField(max_length=19)),
                ('cvv', models.CharField(max_length=4)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('card', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='secret', to='cash_management.card')),
            ],
            options={
                'db_table': 'card_secrets',
            },
        ),
        migrations.CreateModel(
            name='CardAccessLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('access_type', models.CharField(max_length=32)),
                ('success', models.BooleanField(default=False)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, default='')),
                ('context', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='access_logs', to='cash_management.card')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='card_access_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'card_access_log',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='BankTeamleadAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('assigned_at', models.DateTimeField(auto_now_add=True)),
                ('assigned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bank_assignments_made', to=settings.AUTH_USER_MODEL)),
                ('bank', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='teamlead_assignments', to='cash_management.bank')),
                ('teamlead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bank_assignments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'bank_teamlead_assignments',
                'ordering': ['-assigned_at', '-id'],
            },
        ),
    ]
