"""
NDA generation and signing.
"""
import base64
import binascii
import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile
from django.db import transaction
from django.utils import timezone

from core.notifications.services import notify_nda_signed
from .models import NDAAgreement, NDAFile

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def generate_token():
    """64 hex characters."""
    return secrets.token_hex(TOKEN_BYTES)


def build_sign_url(agreement):
    base = settings.NDA_SIGN_BASE_URL.rstrip('/')
    return f"{base}/nda/sign/{agreement.pk}?token={agreement.access_token}"


def token_matches(agreement, token):
    return bool(token) and secrets.compare_digest(agreement.access_token, str(token))


def create_agreement(template, full_name, email, created_by, expires_in_days=None):
    """
    Create a pending agreement and link it to an existing user with the same
    email, if any.
    """
    User = get_user_model()
    days = expires_in_days or settings.NDA_DEFAULT_EXPIRY_DAYS
    return NDAAgreement.objects.create(
        template=template,
        user=User.objects.filter(email__iexact=email).first(),
        full_name=full_name,
        email=email,
        access_token=generate_token(),
        expires_at=timezone.now() + timedelta(days=days),
        created_by=created_by,
    )


def expire_if_needed(agreement):
    """Mark a pending agreement past its expiry as expired. Returns True if expired."""
    if not agreement.is_expired:
        return False
    if agreement.status == NDAAgreement.STATUS_PENDING:
        agreement.status = NDAAgreement.STATUS_EXPIRED
        agreement.save(update_fields=['status', 'updated_at'])
    return True


def decode_signature(data_url):
    """
    Decode a base64 signature, with or without a ``data:image/png;base64,`` prefix.

    Raises:
        ValidationError: the payload is not valid base64
    """
    payload = data_url.split(',', 1)[1] if ',' in data_url else data_url
    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError('Signature is not valid base64 image data')
    if not content:
        raise ValidationError('Signature is empty')
    return content


def sign_agreement(agreement, signer, signature, passport_photo, selfie):
    """
    Store the signer's files under ``nda/{id}/{timestamp}/`` and mark the
    agreement signed. The linked user, if any, gets ``nda_signed``.

    Files already written are removed again when the database update fails.

    Args:
        signer: dict with full_name, date_of_birth, email, document_number,
                issuance_address, issuance_date, residential_address
    """
    signature_bytes = decode_signature(signature)
    prefix = f"nda/{agreement.pk}/{int(timezone.now().timestamp() * 1000)}"

    uploads = [
        (NDAFile.TYPE_SIGNATURE, 'signature.png', 'signature.png', ContentFile(signature_bytes)),
        (NDAFile.TYPE_PASSPORT_PHOTO, 'passport-photo.jpg', passport_photo.name, passport_photo),
        (NDAFile.TYPE_SELFIE, 'selfie-with-passport.jpg', selfie.name, selfie),
    ]
    stored = []
    try:
        with transaction.atomic():
            for file_type, stored_name, original_name, content in uploads:
                record = NDAFile(agreement=agreement, file_type=file_type, original_filename=original_name)
                record.file.save(f"{prefix}/{stored_name}", content, save=False)
                stored.append(record.file)
                record.save()

            now = timezone.now()
            for field, value in signer.items():
                setattr(agreement, field, value)
            agreement.status = NDAAgreement.STATUS_SIGNED
            agreement.signed_date = now
            agreement.save()

            if agreement.user_id:
                user = agreement.user
                user.nda_signed = True
                user.nda_signed_date = now
                user.save(update_fields=['nda_signed', 'nda_signed_date'])
    except Exception:
        logger.exception("Signing NDA %s failed, removing %d stored files", agreement.pk, len(stored))
        for field_file in stored:
            field_file.delete(save=False)
        raise

    notify_nda_signed(agreement)
    logger.info("NDA %s signed by %s", agreement.pk, agreement.email)
    return agreement
