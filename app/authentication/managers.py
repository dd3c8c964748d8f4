"""
Custom user manager for Discord-based authentication.

Related files:
    - models.py: User model that uses this manager

Security:
    - Customers never get a usable password; they log in through Discord
    - Administrators created via createsuperuser get a password for Django admin
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Custom manager for User model keyed by Discord id.

    Usage:
        user = User.objects.create_user(discord_id="80351110224678912")

        admin = User.objects.create_superuser(
            discord_id="80351110224678912",
            password="adminpassword",
        )
    """

    def create_user(self, discord_id, password=None, **extra_fields):
        """
        Create and save a regular user.

        Args:
            discord_id: Discord user id (required)
            password: Password (only administrators need one)
            **extra_fields: Additional fields to set on the user

        Raises:
            ValueError: If discord_id is not provided
        """
        if not discord_id:
            raise ValueError("The Discord id must be set")

        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        email = extra_fields.pop("email", None)
        if email:
            extra_fields["email"] = self.normalize_email(email)

        user = self.model(discord_id=str(discord_id), **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, discord_id, password=None, **extra_fields):
        """
        Create and save a store administrator with Django admin access.

        Raises:
            ValueError: If is_staff or is_superuser is not True
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(discord_id, password, **extra_fields)
