# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ADMIN, ROLE_USER


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    email: str
    first_name: str = ""
    last_name: str = ""


SEED_USERS = [
    SeedUserSpec("Admin", ROLE_ADMIN, "admin@example.com", "Admin", "User"),
    SeedUserSpec("Customer", ROLE_USER, "user@example.com", "John", "Doe"),
]


class Command(BaseCommand):
    help = "Seed the storefront admin and a demo customer (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()
        created_count = 0

        for entry in SEED_USERS:
            is_admin = entry.role == ROLE_ADMIN

            user, created = User.objects.get_or_create(
                email=entry.email,
                defaults={
                    "role": entry.role,
                    "first_name": entry.first_name,
                    "last_name": entry.last_name,
                    "is_staff": is_admin,
                    "is_superuser": is_admin,
                    "is_active": True,
                },
            )

            if created or force_password:
                user.set_password(password)
                user.save(update_fields=["password"])

            if created:
                created_count += 1
                self.stdout.write(f"created: {entry.label} ({entry.role}) -> {entry.email}")
            else:
                self.stdout.write(f"exists:  {entry.label} ({entry.role}) -> {entry.email}")

        self.stdout.write(self.style.SUCCESS(f"Seeded users. Created: {created_count}"))
