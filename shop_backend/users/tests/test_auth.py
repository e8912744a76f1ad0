# users/tests/test_auth.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from permissions.roles import ROLE_ADMIN, ROLE_USER

User = get_user_model()


class RegisterTests(TestCase):
    """
    GUARANTEES:
    - Self-registration always creates a storefront "user"
    - Duplicate emails are rejected
    - A JWT pair is issued on success
    """

    def setUp(self):
        self.client = APIClient()

    def test_register_creates_user_role_and_returns_tokens(self):
        res = self.client.post(
            "/api/auth/register/",
            {
                "email": "new@example.com",
                "password": "Str0ng-pass!",
                "first_name": "New",
                "last_name": "Buyer",
            },
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.data)
        self.assertIn("access", res.data)
        self.assertIn("refresh", res.data)
        self.assertEqual(res.data["user"]["role"], ROLE_USER)

        user = User.objects.get(email="new@example.com")
        self.assertEqual(user.role, ROLE_USER)
        self.assertFalse(user.is_staff)

    def test_register_ignores_client_supplied_role(self):
        res = self.client.post(
            "/api/auth/register/",
            {
                "email": "sneaky@example.com",
                "password": "Str0ng-pass!",
                "role": ROLE_ADMIN,
            },
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(User.objects.get(email="sneaky@example.com").role, ROLE_USER)

    def test_register_rejects_duplicate_email(self):
        User.objects.create_user(email="taken@example.com", password="Str0ng-pass!")

        res = self.client.post(
            "/api/auth/register/",
            {"email": "taken@example.com", "password": "Str0ng-pass!"},
            format="json",
        )

        self.assertEqual(res.status_code, 400)
        self.assertIn("email", res.data)


class LoginTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="buyer@example.com",
            password="Str0ng-pass!",
            first_name="Jane",
        )

    def test_login_returns_token_pair(self):
        res = self.client.post(
            "/api/auth/login/",
            {"email": "buyer@example.com", "password": "Str0ng-pass!"},
            format="json",
        )

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["user"]["email"], "buyer@example.com")
        self.assertTrue(res.data["access"])

    def test_login_with_wrong_password_is_unauthorized(self):
        res = self.client.post(
            "/api/auth/login/",
            {"email": "buyer@example.com", "password": "wrong"},
            format="json",
        )

        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["detail"], "Invalid email or password")

    def test_inactive_user_cannot_login(self):
        self.user.is_active = False
        self.user.save(update_fields=["is_active"])

        res = self.client.post(
            "/api/auth/login/",
            {"email": "buyer@example.com", "password": "Str0ng-pass!"},
            format="json",
        )

        self.assertEqual(res.status_code, 401)

    def test_me_requires_authentication(self):
        res = self.client.get("/api/auth/me/")
        self.assertEqual(res.status_code, 401)

    def test_me_with_bearer_token(self):
        login = self.client.post(
            "/api/auth/login/",
            {"email": "buyer@example.com", "password": "Str0ng-pass!"},
            format="json",
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        res = self.client.get("/api/auth/me/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["id"], str(self.user.id))
        self.assertEqual(res.data["role"], ROLE_USER)


class UserManagerTests(TestCase):
    def test_email_is_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="x")

    def test_admin_role_is_staff(self):
        admin = User.objects.create_user(
            email="ops@example.com", password="Str0ng-pass!", role=ROLE_ADMIN
        )
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_admin)

    def test_superuser_defaults_to_admin_role(self):
        su = User.objects.create_superuser(email="root@example.com", password="Str0ng-pass!")
        self.assertEqual(su.role, ROLE_ADMIN)
        self.assertTrue(su.is_superuser)
