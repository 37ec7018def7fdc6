from django.conf import settings
from django.db import models
from django.utils import timezone

from core.base.managers import ActiveManager
from core.base.models import AuditMixin, ActiveFlagMixin


class NDATemplate(AuditMixin, ActiveFlagMixin):
    name = models.CharField(max_length=255)
    content = models.TextField()
    version = models.CharField(max_length=20, default='1.0')

    objects = ActiveManager()

    class Meta:
        db_table = 'nda_templates'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.name} v{self.version}"


class NDAAgreement(models.Model):
    """
    An NDA sent for signature. The signer opens a public link carrying
    ``access_token``; signing fills in the signer details.
    """

    STATUS_PENDING = 'pending'
    STATUS_SIGNED = 'signed'
    STATUS_EXPIRED = 'expired'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_SIGNED, 'Signed'),
        (STATUS_EXPIRED, 'Expired'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    template = models.ForeignKey(NDATemplate, on_delete=models.PROTECT, related_name='agreements')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='nda_agreements'
    )
    full_name = models.CharField(max_length=255)
    email = models.EmailField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    access_token = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    signed_date = models.DateTimeField(null=True, blank=True)

    # Signer details
    date_of_birth = models.DateField(null=True, blank=True)
    document_number = models.CharField(max_length=100, blank=True, default='')
    issuance_address = models.TextField(blank=True, default='')
    issuance_date = models.DateField(null=True, blank=True)
    residential_address = models.TextField(blank=True, default='')

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='nda_agreements_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'nda_agreements'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"NDA {self.pk} for {self.email} ({self.status})"

    @property
    def is_expired(self):
        return self.expires_at < timezone.now()


class NDAFile(models.Model):
    TYPE_SIGNATURE = 'signature'
    TYPE_PASSPORT_PHOTO = 'passport_photo'
    TYPE_SELFIE = 'selfie_with_passport'

    TYPE_CHOICES = [
        (TYPE_SIGNATURE, 'Signature'),
        (TYPE_PASSPORT_PHOTO, 'Passport photo'),
        (TYPE_SELFIE, 'Selfie with passport'),
    ]

    agreement = models.ForeignKey(NDAAgreement, on_delete=models.CASCADE, related_name='files')
    file_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    file = models.FileField(max_length=500)
    original_filename = models.CharField(max_length=255, blank=True, default='')
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'nda_files'
        ordering = ['id']
