"""Unit tests for accounts_api.services.credentials: account creation, login checks and updates."""

import unittest

from accounts_api.core.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
)
from accounts_api.core.security import verify_password
from accounts_api.models import User
from accounts_api.services.credentials import (
    authenticate,
    change_password,
    create_user,
    get_user,
    update_fields,
)
from support import make_session_factory, make_settings, make_user


class CredentialTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings()
        self.db = make_session_factory()()

    def tearDown(self) -> None:
        self.db.close()


class TestCreateUser(CredentialTestCase):
    def test_password_is_hashed(self) -> None:
        user = make_user(self.db, self.settings, password="plaintext-pw")
        self.assertNotEqual(user.password_hash, "plaintext-pw")
        self.assertTrue(verify_password("plaintext-pw", user.password_hash))
        self.assertFalse(verify_password("plaintext-pX", user.password_hash))

    def test_normalizes_username_and_email(self) -> None:
        user = create_user(
            self.db, "  Alice01 ", " Alice@X.com ", " Alice Doe ", "longenough", self.settings
        )
        self.assertEqual(user.username, "alice01")
        self.assertEqual(user.email, "alice@x.com")
        self.assertEqual(user.fullname, "Alice Doe")
        self.assertIsNone(user.refresh_token)
        self.assertEqual(user.avatar, "")

    def test_stores_image_urls(self) -> None:
        user = create_user(
            self.db,
            "bob",
            "bob@x.com",
            "Bob",
            "longenough",
            self.settings,
            avatar_url="https://cdn/a.png",
            cover_url="https://cdn/c.png",
        )
        self.assertEqual(user.avatar, "https://cdn/a.png")
        self.assertEqual(user.cover_image, "https://cdn/c.png")

    def test_missing_fields(self) -> None:
        for args in (
            ("", "a@x.com", "A", "longenough"),
            ("alice", None, "A", "longenough"),
            ("alice", "a@x.com", "  ", "longenough"),
            ("alice", "a@x.com", "A", None),
        ):
            with self.assertRaises(BadRequestError) as ctx:
                create_user(self.db, *args, self.settings)
            self.assertEqual(ctx.exception.message, "All fields are required")

    def test_invalid_formats(self) -> None:
        with self.assertRaises(BadRequestError):
            create_user(self.db, "alice_01", "a@x.com", "A", "longenough", self.settings)
        with self.assertRaises(BadRequestError):
            create_user(self.db, "alice", "not-an-email", "A", "longenough", self.settings)
        with self.assertRaises(BadRequestError):
            create_user(self.db, "alice", "a@x.com", "A", "short", self.settings)
        self.assertEqual(self.db.query(User).count(), 0)

    def test_duplicate_username_conflict_leaves_original(self) -> None:
        original = make_user(self.db, self.settings)
        original_hash = original.password_hash
        with self.assertRaises(ConflictError):
            create_user(
                self.db, "ALICE01", "other@x.com", "Impostor", "another-pw", self.settings
            )
        self.db.expire_all()
        stored = self.db.get(User, original.id)
        self.assertEqual(stored.email, "alice@x.com")
        self.assertEqual(stored.fullname, "Alice Doe")
        self.assertEqual(stored.password_hash, original_hash)
        self.assertEqual(self.db.query(User).count(), 1)

    def test_duplicate_email_conflict(self) -> None:
        make_user(self.db, self.settings)
        with self.assertRaises(ConflictError) as ctx:
            create_user(self.db, "bob", "alice@x.com", "Bob", "another-pw", self.settings)
        self.assertIn("Email", ctx.exception.message)
        self.assertEqual(self.db.query(User).count(), 1)


    def test_password_over_72_bytes_rejected(self) -> None:
        with self.assertRaises(BadRequestError) as ctx:
            create_user(
                self.db, "alice01", "alice@x.com", "Alice", "a" * 72 + "-tail", self.settings
            )
        self.assertIn("72 bytes", ctx.exception.message)
        self.assertEqual(self.db.query(User).count(), 0)


class TestAuthenticate(CredentialTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = make_user(self.db, self.settings)

    def test_success_case_insensitive_email(self) -> None:
        self.assertEqual(authenticate(self.db, "ALICE@x.com", "correct-horse-1").id, self.user.id)

    def test_wrong_password(self) -> None:
        with self.assertRaises(UnauthorizedError):
            authenticate(self.db, "alice@x.com", "wrong-password")

    def test_unknown_email(self) -> None:
        with self.assertLogs("accounts_api.services.credentials", level="WARNING") as logs:
            with self.assertRaises(NotFoundError):
                authenticate(self.db, "nobody@x.com", "correct-horse-1")
        self.assertEqual(logs.records[0].reason, "unknown_email")

    def test_missing_email(self) -> None:
        with self.assertRaises(BadRequestError):
            authenticate(self.db, "", "correct-horse-1")


class TestUpdateFields(CredentialTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = make_user(self.db, self.settings)

    def test_updates_profile(self) -> None:
        user = update_fields(self.db, self.user.id, {"fullname": " Alice B ", "email": "A2@x.com"})
        self.assertEqual(user.fullname, "Alice B")
        self.assertEqual(user.email, "a2@x.com")

    def test_rejects_credential_fields(self) -> None:
        for key in ("password", "password_hash", "refresh_token", "username"):
            with self.assertRaises(BadRequestError):
                update_fields(self.db, self.user.id, {key: "x"})

    def test_nothing_to_update(self) -> None:
        with self.assertRaises(BadRequestError):
            update_fields(self.db, self.user.id, {"fullname": None})

    def test_email_taken(self) -> None:
        make_user(self.db, self.settings, username="bob", email="bob@x.com")
        with self.assertRaises(ConflictError):
            update_fields(self.db, self.user.id, {"email": "bob@x.com"})

    def test_same_email_is_allowed(self) -> None:
        user = update_fields(self.db, self.user.id, {"email": "alice@x.com"})
        self.assertEqual(user.email, "alice@x.com")

    def test_unknown_user(self) -> None:
        with self.assertRaises(NotFoundError):
            update_fields(self.db, 424242, {"fullname": "Ghost"})


class TestChangePassword(CredentialTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = make_user(self.db, self.settings)

    def test_change(self) -> None:
        change_password(self.db, self.user.id, "correct-horse-1", "new-password-2", self.settings)
        stored = get_user(self.db, self.user.id)
        self.assertTrue(verify_password("new-password-2", stored.password_hash))
        self.assertFalse(verify_password("correct-horse-1", stored.password_hash))

    def test_wrong_old_password(self) -> None:
        with self.assertRaises(UnauthorizedError):
            change_password(self.db, self.user.id, "nope-nope", "new-password-2", self.settings)

    def test_new_password_too_short(self) -> None:
        with self.assertRaises(BadRequestError):
            change_password(self.db, self.user.id, "correct-horse-1", "short", self.settings)

    def test_new_password_over_72_bytes(self) -> None:
        with self.assertRaises(BadRequestError):
            change_password(
                self.db, self.user.id, "correct-horse-1", "b" * 80, self.settings
            )
        stored = get_user(self.db, self.user.id)
        self.assertTrue(verify_password("correct-horse-1", stored.password_hash))

    def test_unknown_user(self) -> None:
        with self.assertRaises(NotFoundError):
            change_password(self.db, 424242, "correct-horse-1", "new-password-2", self.settings)


if __name__ == "__main__":
    unittest.main()
