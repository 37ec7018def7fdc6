from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('cash_management', '0001_initial'),
        ('casinos', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Work',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('deposit_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('status', models.CharField(choices=[('active', 'Active'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('blocked', 'Blocked')], db_index=True, default='active', max_length=20)),
                ('casino_login', models.CharField(blank=True, default='', max_length=255)),
                ('casino_password', models.CharField(blank=True, default='', max_length=255)),
                ('notes', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('junior', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='works', to=settings.AUTH_USER_MODEL)),
                ('casino', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='works', to='casinos.casino')),
                ('card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='works', to='cash_management.card')),
            ],
            options={
                'db_table': 'works',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='WorkStatusHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_status', models.CharField(blank=True, max_length=20, null=True)),
                ('new_status', models.CharField(max_length=20)),
                ('notes', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('work', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='status_history', to='works.work')),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='work_status_changes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'work_status_history',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='WorkWithdrawal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('withdrawal_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('status', models.CharField(choices=[('new', 'New'), ('waiting', 'Waiting'), ('received', 'Received'), ('problem', 'Problem'), ('blocked', 'Blocked')], db_index=True, default='new', max_length=20)),
                ('comment', models.TextField(blank=True, default='')),
                ('teamlead_comment', models.TextField(blank=True, null=True)),
                ('manager_comment', models.TextField(blank=True, null=True)),
                ('hr_comment', models.TextField(blank=True, null=True)),
                ('cfo_comment', models.TextField(blank=True, null=True)),
                ('admin_comment', models.TextField(blank=True, null=True)),
                ('alarm_message', models.TextField(blank=True, null=True)),
                ('checked_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('work', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='withdrawals', to='works.work')),
                ('checked_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='withdrawals_checked', to=settings.AUTH_USER_MODEL)),
                ('checked_by_teamlead', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='withdrawals_checked_as_teamlead', to=settings.AUTH_USER_MODEL)),
                ('checked_by_hr', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='withdrawals_checked_as_hr', to=settings.AUTH_USER_MODEL)),
                ('checked_by_cfo', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='withdrawals_checked_as_cfo', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'work_withdrawals',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='WithdrawalStatusHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_status', models.CharField(blank=True, max_length=20, null=True)),
                ('new_status', models.CharField(max_length=20)),
                ('comment', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('withdrawal', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='status_history', to='works.workwithdrawal')),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='withdrawal_status_changes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'withdrawal_status_history',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
