from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('cash_management', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Casino',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('name', models.CharField(max_length=255)),
                ('url', models.URLField(max_length=500)),
                ('promo', models.CharField(blank=True, max_length=255, null=True)),
                ('company', models.CharField(blank=True, max_length=255, null=True)),
                ('currency', models.CharField(choices=[('USD', 'USD'), ('GBP', 'GBP'), ('EUR', 'EUR'), ('CAD', 'CAD')], default='USD', max_length=3)),
                ('status', models.CharField(choices=[('new', 'New'), ('testing', 'Testing'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('maintenance', 'Maintenance'), ('blocked', 'Blocked')], db_index=True, default='new', max_length=20)),
                ('allowed_bins', models.JSONField(blank=True, default=list)),
                ('auto_approve_limit', models.DecimalField(decimal_places=2, default=Decimal('100'), max_digits=14)),
                ('withdrawal_time_value', models.PositiveIntegerField(default=0)),
                ('withdrawal_time_unit', models.CharField(choices=[('instant', 'Instant'), ('minutes', 'Minutes'), ('hours', 'Hours'), ('days', 'Days')], default='instant', max_length=10)),
                ('notes', models.TextField(blank=True, default='')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='casinos_casino_created', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last updated this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='casinos_casino_updated', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'casinos',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='CasinoTest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('test_type', models.CharField(default='full', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('test_result', models.CharField(blank=True, choices=[('approved', 'Approved'), ('rejected', 'Rejected')], max_length=20, null=True)),
                ('rating', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('login', models.CharField(blank=True, default='', max_length=255)),
                ('password', models.CharField(blank=True, default='', max_length=255)),
                ('deposit_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('deposit_success', models.BooleanField(blank=True, null=True)),
                ('withdrawal_success', models.BooleanField(blank=True, null=True)),
                ('registration_time', models.PositiveIntegerField(blank=True, help_text='Minutes', null=True)),
                ('withdrawal_time', models.PositiveIntegerField(blank=True, help_text='Minutes', null=True)),
                ('issues_found', models.JSONField(blank=True, default=list)),
                ('recommended_bins', models.JSONField(blank=True, default=list)),
                ('test_notes', models.TextField(blank=True, default='')),
                ('final_report', models.TextField(blank=True, default='')),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('casino', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tests', to='casinos.casino')),
                ('tester', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='casino_tests', to=settings.AUTH_USER_MODEL)),
                ('card', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='casino_tests', to='cash_management.card')),
            ],
            options={
                'db_table': 'casino_tests',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='TestWithdrawal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('withdrawal_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('withdrawal_status', models.CharField(choices=[('new', 'New'), ('waiting', 'Waiting'), ('received', 'Received'), ('blocked', 'Blocked'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='new', max_length=20)),
                ('notes', models.TextField(blank=True, default='')),
                ('manager_comment', models.TextField(blank=True, default='')),
                ('checked_at', models.DateTimeField(blank=True, null=True)),
                ('requested_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('test', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='withdrawals', to='casinos.casinotest')),
                ('checked_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='test_withdrawals_checked', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'test_withdrawals',
                'ordering': ['-requested_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='CardCasinoAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('assignment_type', models.CharField(choices=[('testing', 'Testing'), ('work', 'Work')], default='testing', max_length=20)),
                ('status', models.CharField(choices=[('active', 'Active'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='active', max_length=20)),
                ('deposit_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('notes', models.TextField(blank=True, default='')),
                ('assigned_at', models.DateTimeField(auto_now_add=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='casino_assignments', to='cash_management.card')),
                ('casino', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='card_assignments', to='casinos.casino')),
                ('assigned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='card_casino_assignments_made', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'card_casino_assignments',
                'ordering': ['-assigned_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='JuniorCasinoAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], db_index=True, default='active', max_length=20)),
                ('notes', models.TextField(blank=True, default='')),
                ('assigned_at', models.DateTimeField(auto_now_add=True)),
                ('ended_at', models.DateTimeField(blank=True, null=True)),
                ('junior', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='junior_casino_assignments', to=settings.AUTH_USER_MODEL)),
                ('casino', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='junior_assignments', to='casinos.casino')),
                ('assigned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='junior_casino_assignments_made', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'junior_casino_assignments',
                'ordering': ['-assigned_at', '-id'],
            },
        ),
    ]
