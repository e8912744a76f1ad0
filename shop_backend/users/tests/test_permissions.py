# users/tests/test_permissions.py

from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.management import call_command
from django.test import TestCase

from permissions.roles import (
    CAP_CATALOG_EDIT,
    CAP_ORDERS_DECIDE_CANCEL,
    CAP_ORDERS_PLACE,
    ROLE_ADMIN,
    ROLE_USER,
    HasCapability,
    capabilities_for,
)

User = get_user_model()


def _request(user):
    return SimpleNamespace(user=user)


class CapabilityMapTests(TestCase):
    """
    GUARANTEES:
    - Admins hold every capability
    - Customers can only place orders
    - Views without a declared capability are closed
    """

    def setUp(self):
        self.admin = User.objects.create_user(
            email="admin@example.com", password="x", role=ROLE_ADMIN
        )
        self.customer = User.objects.create_user(
            email="customer@example.com", password="x", role=ROLE_USER
        )

    def test_capabilities_per_role(self):
        self.assertIn(CAP_CATALOG_EDIT, capabilities_for(self.admin))
        self.assertIn(CAP_ORDERS_DECIDE_CANCEL, capabilities_for(self.admin))
        self.assertEqual(capabilities_for(self.customer), {CAP_ORDERS_PLACE})

    def test_has_capability(self):
        view = SimpleNamespace(required_capability=CAP_CATALOG_EDIT)
        perm = HasCapability()

        self.assertTrue(perm.has_permission(_request(self.admin), view))
        self.assertFalse(perm.has_permission(_request(self.customer), view))
        self.assertFalse(perm.has_permission(_request(AnonymousUser()), view))

    def test_has_capability_denies_when_view_declares_none(self):
        view = SimpleNamespace()
        self.assertFalse(HasCapability().has_permission(_request(self.admin), view))


class SeedUsersCommandTests(TestCase):
    def test_seed_users_is_idempotent(self):
        call_command("seed_users", password="Pass1234!")
        call_command("seed_users", password="Pass1234!")

        self.assertEqual(User.objects.count(), 2)
        admin = User.objects.get(email="admin@example.com")
        self.assertEqual(admin.role, ROLE_ADMIN)
        self.assertTrue(admin.is_superuser)
        self.assertTrue(admin.check_password("Pass1234!"))
        self.assertEqual(User.objects.get(email="user@example.com").role, ROLE_USER)
