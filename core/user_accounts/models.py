"""
User Account Models
Handles user authentication, roles and account status.
"""
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.db import models

from core.job_roles.core_config import (
    Roles,
    UserStatus,
    ROLE_CHOICES,
    USER_STATUS_CHOICES,
    ALL_ROLES,
)


class CustomUserManager(BaseUserManager):
    """
    Custom user manager for CustomUser model.
    Handles user creation with a role and an account status.
    """

    def create_user(self, email, password=None, role=Roles.JUNIOR, **extra_fields):
        """
        Create and save a user with any role.

        Args:
            email: User's email address (used for authentication)
            password: User's password (will be hashed)
            role: One of the role strings in core_config.Roles
            **extra_fields: Additional fields to set on the user

        Returns:
            CustomUser: The created user instance
        """
        if not email:
            raise ValueError('Email is required')
        if role not in ALL_ROLES:
            raise ValueError(f"Unknown role '{role}'")

        email = self.normalize_email(email)
        extra_fields.setdefault('status', UserStatus.ACTIVE)

        user = self.model(email=email, role=role, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and save an admin user.
        Required by Django for the createsuperuser management command.
        """
        return self.create_user(email=email, password=password, role=Roles.ADMIN, **extra_fields)


class CustomUser(AbstractBaseUser):
    """Custom user model with email authentication and a single role string"""
    email = models.EmailField(unique=True, db_index=True)
    first_name = models.CharField(max_length=150, blank=True, default='')
    last_name = models.CharField(max_length=150, blank=True, default='')
    phone = models.CharField(max_length=32, blank=True, default='')

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=Roles.JUNIOR, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=USER_STATUS_CHOICES,
        default=UserStatus.ACTIVE,
        db_index=True
    )

    telegram_username = models.CharField(max_length=32, null=True, blank=True)
    usdt_wallet = models.CharField(max_length=42, null=True, blank=True)
    salary_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    salary_bonus = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # Juniors report to a team lead
    team_lead = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='juniors'
    )

    nda_signed = models.BooleanField(default=False)
    nda_signed_date = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Manager
    objects = CustomUserManager()

    # Django authentication settings
    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'custom_users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.display_name} ({self.role})"

    @property
    def display_name(self):
        """'First Last', or the email when no name is set."""
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or self.email

    @property
    def is_active_status(self):
        return self.status == UserStatus.ACTIVE

    def is_admin(self):
        """
        Check if user is an admin.

        Returns:
            bool: True if user has the admin role
        """
        return self.role == Roles.ADMIN

    def has_role(self, *roles):
        return self.role in roles

    def is_team_lead_of(self, user):
        """True when ``user`` is a junior reporting to this team lead."""
        return (
            self.role == Roles.TEAMLEAD
            and user is not None
            and user.team_lead_id == self.pk
        )

    def get_active_juniors(self):
        """Active juniors reporting to this user."""
        return CustomUser.objects.filter(
            team_lead=self,
            role=Roles.JUNIOR,
            status=UserStatus.ACTIVE
        )
