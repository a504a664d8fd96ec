from decimal import Decimal

from django.contrib.auth.base_user import BaseUserManager
from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from .enums import UserRole

class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The Email must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", UserRole.ADMIN)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email, password, **extra_fields)

class User(AbstractUser):
    """
    Clinic staff member. Patients are records, not users.
    """
    # remove username field and use email as the unique login identifier
    username = None
    email = models.EmailField(_("email address"), unique=True)

    role = models.CharField(max_length=20, choices=UserRole.choices, default=UserRole.RECEPTIONIST)
    phone = models.CharField(max_length=32, blank=True)

    # doctor/nurse availability + consultation pricing
    specialty = models.CharField(max_length=120, blank=True)
    is_available = models.BooleanField(default=True)
    consultation_fee = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Overrides the catalog consultation price when set.",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()  # use the custom manager so create_user expects email first

    class Meta:
        indexes = [models.Index(fields=["role", "is_available"], name="user_role_avail_idx")]

    @property
    def fullname(self) -> str:
        return self.get_full_name().strip() or self.email

    def __str__(self):
        return f"{self.email} ({self.role})"
