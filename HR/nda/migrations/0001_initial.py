from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='NDATemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('is_active', models.BooleanField(default=True, help_text='Set to False instead of deleting.')),
                ('name', models.CharField(max_length=255)),
                ('content', models.TextField()),
                ('version', models.CharField(default='1.0', max_length=20)),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='nda_ndatemplate_created', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last updated this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='nda_ndatemplate_updated', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'nda_templates',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='NDAAgreement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('signed', 'Signed'), ('expired', 'Expired'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('access_token', models.CharField(max_length=64, unique=True)),
                ('expires_at', models.DateTimeField()),
                ('signed_date', models.DateTimeField(blank=True, null=True)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('document_number', models.CharField(blank=True, default='', max_length=100)),
                ('issuance_address', models.TextField(blank=True, default='')),
                ('issuance_date', models.DateField(blank=True, null=True)),
                ('residential_address', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('template', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='agreements', to='nda.ndatemplate')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='nda_agreements', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='nda_agreements_created', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'nda_agreements',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='NDAFile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file_type', models.CharField(choices=[('signature', 'Signature'), ('passport_photo', 'Passport photo'), ('selfie_with_passport', 'Selfie with passport')], max_length=30)),
                ('file', models.FileField(max_length=500, upload_to='')),
                ('original_filename', models.CharField(blank=True, default='', max_length=255)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('agreement', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to='nda.ndaagreement')),
            ],
            options={
                'db_table': 'nda_files',
                'ordering': ['id'],
            },
        ),
    ]
