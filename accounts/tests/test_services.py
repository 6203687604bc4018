from __future__ import annotations

from allauth.account.models import EmailAddress
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase, override_settings
from django.urls import reverse

from accounts.models import MemberProfile
from accounts.services import is_room_admin, member_identity, upsert_member_profile


def make_user(username: str, email: str = "", **extra):
    return get_user_model().objects.create_user(
        username=username,
        email=email,
        password="Sturdy-Pass-2024",
        **extra,
    )


def make_verified_user(username: str, email: str, **extra):
    user = make_user(username, email, **extra)
    EmailAddress.objects.create(user=user, email=email, verified=True, primary=True)
    return user


class MemberIdentityTests(TestCase):
    def test_prefers_full_name(self) -> None:
        user = make_user("mia", "mia@example.com", first_name="Mia", last_name="Wong")
        identity = member_identity(user)

        self.assertEqual(identity.email, "mia@example.com")
        self.assertEqual(identity.display_name, "Mia Wong")

    def test_falls_back_to_email_then_placeholder(self) -> None:
        self.assertEqual(member_identity(make_user("a", "a@example.com")).display_name, "a@example.com")
        self.assertEqual(member_identity(make_user("b")).display_name, "User")


@override_settings(PRACTICE_ROOM_ADMIN_EMAILS=["admin@example.com"])
class RoomAdminTests(TestCase):
    def test_allow_list_match_is_case_insensitive(self) -> None:
        self.assertTrue(is_room_admin(make_verified_user("boss", "Admin@Example.com")))

    def test_other_members_are_not_admins(self) -> None:
        self.assertFalse(is_room_admin(make_user("member", "member@example.com")))
        self.assertFalse(is_room_admin(make_user("noemail")))

    def test_unverified_allow_listed_email_is_not_admin(self) -> None:
        self.assertFalse(is_room_admin(make_user("claimant", "admin@example.com")))

        pending = make_user("pending", "ADMIN@example.com")
        EmailAddress.objects.create(user=pending, email="ADMIN@example.com", verified=False, primary=True)
        self.assertFalse(is_room_admin(pending))

    def test_any_verified_address_on_the_allow_list_counts(self) -> None:
        user = make_user("boss", "boss@personal.example")
        EmailAddress.objects.create(user=user, email="admin@example.com", verified=True)

        self.assertTrue(is_room_admin(user))

    def test_anonymous_and_missing_users(self) -> None:
        self.assertFalse(is_room_admin(AnonymousUser()))
        self.assertFalse(is_room_admin(None))

    def test_superusers_are_admins(self) -> None:
        root = get_user_model().objects.create_superuser("root", "root@example.com", "Sturdy-Pass-2024")
        self.assertTrue(is_room_admin(root))


@override_settings(PRACTICE_ROOM_ADMIN_EMAILS=["admin@example.com"])
class UpsertMemberProfileTests(TestCase):
    def test_creates_then_refreshes(self) -> None:
        user = make_user("mia", "mia@example.com")

        self.assertTrue(upsert_member_profile(user))
        user.first_name = "Mia"
        user.save()
        self.assertTrue(upsert_member_profile(user))

        profile = MemberProfile.objects.get(user=user)
        self.assertEqual(profile.display_name, "Mia")
        self.assertEqual(profile.role, MemberProfile.Role.USER)
        self.assertEqual(MemberProfile.objects.count(), 1)

    def test_records_admin_role(self) -> None:
        user = make_verified_user("boss", "admin@example.com")
        upsert_member_profile(user)

        self.assertEqual(MemberProfile.objects.get(user=user).role, MemberProfile.Role.ADMIN)


class RegisterViewTests(TestCase):
    def test_register_creates_member_and_logs_in(self) -> None:
        response = self.client.post(
            reverse("accounts:register"),
            {
                "username": "newband",
                "email": "NewBand@Example.com",
                "first_name": "New Band",
                "password1": "Sturdy-Pass-2024",
                "password2": "Sturdy-Pass-2024",
            },
        )

        self.assertEqual(response.status_code, 302)
        user = get_user_model().objects.get(username="newband")
        self.assertEqual(user.email, "newband@example.com")
        self.assertEqual(MemberProfile.objects.get(user=user).display_name, "New Band")
        self.assertEqual(int(self.client.session["_auth_user_id"]), user.pk)

    def test_duplicate_email_is_refused(self) -> None:
        make_user("first", "taken@example.com")

        response = self.client.post(
            reverse("accounts:register"),
            {
                "username": "second",
                "email": "taken@example.com",
                "password1": "Sturdy-Pass-2024",
                "password2": "Sturdy-Pass-2024",
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertFalse(get_user_model().objects.filter(username="second").exists())

    @override_settings(PRACTICE_ROOM_ADMIN_EMAILS=["admin@example.com"])
    def test_allow_listed_email_cannot_be_registered_locally(self) -> None:
        response = self.client.post(
            reverse("accounts:register"),
            {
                "username": "mallory",
                "email": "Admin@Example.com",
                "password1": "Sturdy-Pass-2024",
                "password2": "Sturdy-Pass-2024",
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertFalse(get_user_model().objects.filter(username="mallory").exists())
        self.assertNotIn("_auth_user_id", self.client.session)


@override_settings(PRACTICE_ROOM_ADMIN_EMAILS=["admin@example.com"])
class MeApiTests(TestCase):
    def test_requires_login(self) -> None:
        self.assertEqual(self.client.get(reverse("accounts:me")).status_code, 401)

    def test_reports_identity_and_admin_flag(self) -> None:
        user = make_verified_user("boss", "admin@example.com", first_name="Boss")
        self.client.force_login(user)

        data = self.client.get(reverse("accounts:me")).json()

        self.assertEqual(data, {"user_id": user.pk, "email": "admin@example.com", "display_name": "Boss", "is_admin": True})

    def test_self_declared_admin_email_grants_nothing(self) -> None:
        claimant = make_user("claimant", "admin@example.com")
        self.client.force_login(claimant)

        data = self.client.get(reverse("accounts:me")).json()
        reset = self.client.post(reverse("reservations:reset_week_api"))

        self.assertFalse(data["is_admin"])
        self.assertEqual((reset.status_code, reset.json()["code"]), (403, "forbidden"))
