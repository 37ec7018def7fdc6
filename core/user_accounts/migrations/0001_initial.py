from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='CustomUser',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('email', models.EmailField(db_index=True, max_length=254, unique=True)),
                ('first_name', models.CharField(blank=True, default='', max_length=150)),
                ('last_name', models.CharField(blank=True, default='', max_length=150)),
                ('phone', models.CharField(blank=True, default='', max_length=32)),
                ('role', models.CharField(choices=[('junior', 'Junior'), ('teamlead', 'Team Lead'), ('manager', 'Manager'), ('hr', 'HR'), ('cfo', 'CFO'), ('admin', 'Admin'), ('tester', 'Tester'), ('ceo', 'CEO'), ('qa_assistant', 'QA Assistant')], db_index=True, default='junior', max_length=20)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive'), ('terminated', 'Terminated')], db_index=True, default='active', max_length=20)),
                ('telegram_username', models.CharField(blank=True, max_length=32, null=True)),
                ('usdt_wallet', models.CharField(blank=True, max_length=42, null=True)),
                ('salary_percentage', models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ('salary_bonus', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('nda_signed', models.BooleanField(default=False)),
                ('nda_signed_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team_lead', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='juniors', to='user_accounts.customuser')),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'db_table': 'custom_users',
                'ordering': ['-created_at'],
            },
        ),
    ]
