"""Unit and integration tests for taskmanager.services.auth: register, login, change password, lookups."""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from fakes import FakeClock, make_account, make_session_factory, naive, token_config
from taskmanager.core.security import hash_password, verify_password
from taskmanager.core.tokens import TokenService
from taskmanager.models import Role, User
from taskmanager.repositories.users import SqlAlchemyAccountStore
from taskmanager.services.auth import (
    DUPLICATE_EMAIL_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
    AccountLookupError,
    AuthOutcome,
    AuthService,
)


def _db_error() -> OperationalError:
    return OperationalError("INSERT INTO users", {}, Exception("database is locked"))


class AuthServiceDbTestCase(unittest.TestCase):
    """Runs the service against a real SQLAlchemy store on in-memory SQLite."""

    def setUp(self) -> None:
        self.session = make_session_factory()()
        self.clock = FakeClock()
        self.tokens = TokenService(token_config(), clock=self.clock)
        self.service = AuthService(SqlAlchemyAccountStore(self.session), self.tokens, clock=self.clock)

    def tearDown(self) -> None:
        self.session.close()

    def register(self, email: str = "a@x.com", password: str = "secret1", **kwargs: object):
        return self.service.register(
            first_name=kwargs.pop("first_name", "Ada"),
            last_name=kwargs.pop("last_name", "Lovelace"),
            email=email,
            password=password,
            **kwargs,
        )


class TestRegister(AuthServiceDbTestCase):
    """register creates an active account and returns a token plus the public view."""

    def test_success_returns_token_and_user(self) -> None:
        result = self.register()
        self.assertTrue(result.success)
        self.assertEqual(result.outcome, AuthOutcome.OK)
        self.assertEqual(result.message, "Registration successful")
        self.assertIsNotNone(result.token)
        self.assertEqual(result.user.email, "a@x.com")
        self.assertEqual(result.user.role, "User")
        self.assertEqual(result.user.first_name, "Ada")
        self.assertIsNone(result.user.last_login_at)
        self.assertNotIn("password_hash", result.user.model_dump())

        claims = self.tokens.verify(result.token)
        self.assertEqual(claims.subject_id, result.user.user_id)
        self.assertEqual(claims.role, "User")

    def test_account_is_persisted_with_hash(self) -> None:
        result = self.register(password="secret1")
        account = self.session.get(User, result.user.user_id)
        self.assertTrue(account.is_active)
        self.assertNotEqual(account.password_hash, "secret1")
        self.assertTrue(verify_password("secret1", account.password_hash))
        self.assertEqual(naive(account.created_at), naive(self.clock.now))

    def test_email_is_normalized(self) -> None:
        result = self.register(email="  Mixed.Case@Example.COM ")
        self.assertEqual(result.user.email, "mixed.case@example.com")

    def test_role_is_kept(self) -> None:
        result = self.register(role=Role.MANAGER)
        self.assertEqual(result.user.role, "Manager")
        result = self.register(email="b@x.com", role="Admin")
        self.assertEqual(result.user.role, "Admin")

    def test_unknown_role_is_a_validation_failure(self) -> None:
        result = self.register(role="SuperUser")
        self.assertFalse(result.success)
        self.assertEqual(result.outcome, AuthOutcome.VALIDATION_FAILED)
        self.assertTrue(result.errors)
        self.assertIsNone(self.session.query(User).first())

    def test_duplicate_email_differing_in_case(self) -> None:
        self.assertTrue(self.register(email="a@x.com").success)
        result = self.register(email="A@X.com", password="other")
        self.assertFalse(result.success)
        self.assertEqual(result.outcome, AuthOutcome.DUPLICATE_EMAIL)
        self.assertEqual(result.message, DUPLICATE_EMAIL_MESSAGE)
        self.assertIsNone(result.token)
        self.assertEqual(self.session.query(User).count(), 1)

    def test_blank_names_are_a_validation_failure(self) -> None:
        result = self.register(first_name="   ", last_name="\t")
        self.assertEqual(result.outcome, AuthOutcome.VALIDATION_FAILED)
        self.assertEqual(len(result.errors), 2)
        self.assertIsNone(self.session.query(User).first())

    def test_names_are_stripped(self) -> None:
        result = self.register(first_name="  Ada ", last_name=" Lovelace")
        self.assertEqual(result.user.first_name, "Ada")
        self.assertEqual(result.user.last_name, "Lovelace")


class TestLogin(AuthServiceDbTestCase):
    """login returns a token for good credentials and one uniform failure otherwise."""

    def setUp(self) -> None:
        super().setUp()
        self.registered = self.register(email="a@x.com", password="secret1")

    def test_success(self) -> None:
        self.clock.advance(timedelta(hours=1))
        result = self.service.login("a@x.com", "secret1")
        self.assertTrue(result.success)
        self.assertEqual(result.message, "Login successful")
        self.assertEqual(self.tokens.verify(result.token).email, "a@x.com")
        self.assertEqual(naive(result.user.last_login_at), naive(self.clock.now))

    def test_last_login_not_before_created(self) -> None:
        self.clock.advance(timedelta(minutes=5))
        self.service.login("a@x.com", "secret1")
        account = self.session.get(User, self.registered.user.user_id)
        self.assertGreaterEqual(naive(account.last_login_at), naive(account.created_at))

    def test_email_lookup_ignores_case(self) -> None:
        self.assertTrue(self.service.login("A@X.COM", "secret1").success)

    def test_failures_are_indistinguishable(self) -> None:
        account = self.session.query(User).one()
        self.register(email="inactive@x.com", password="secret1")
        inactive = self.session.query(User).filter(User.email == "inactive@x.com").one()
        inactive.is_active = False
        self.session.commit()

        results = [
            self.service.login("a@x.com", "wrong"),
            self.service.login("nobody@x.com", "secret1"),
            self.service.login("inactive@x.com", "secret1"),
        ]
        for result in results:
            self.assertFalse(result.success)
            self.assertEqual(result.outcome, AuthOutcome.INVALID_CREDENTIALS)
            self.assertEqual(result.message, INVALID_CREDENTIALS_MESSAGE)
            self.assertIsNone(result.token)
            self.assertIsNone(result.user)
        self.assertEqual(len({(r.outcome, r.message) for r in results}), 1)
        self.assertIsNone(account.last_login_at)


class TestChangePassword(AuthServiceDbTestCase):
    """change_password checks the current password and swaps the stored hash."""

    def setUp(self) -> None:
        super().setUp()
        self.account_id = self.register(email="a@x.com", password="secret1").user.user_id

    def test_scenario(self) -> None:
        self.assertTrue(self.service.change_password(self.account_id, "secret1", "secret2"))
        old = self.service.login("a@x.com", "secret1")
        self.assertEqual(old.outcome, AuthOutcome.INVALID_CREDENTIALS)
        self.assertTrue(self.service.login("a@x.com", "secret2").success)

    def test_wrong_current_password(self) -> None:
        self.assertFalse(self.service.change_password(self.account_id, "nope", "secret2"))
        self.assertTrue(self.service.login("a@x.com", "secret1").success)

    def test_unknown_account(self) -> None:
        self.assertFalse(self.service.change_password(9999, "secret1", "secret2"))

    def test_inactive_account(self) -> None:
        account = self.session.get(User, self.account_id)
        account.is_active = False
        self.session.commit()
        self.assertFalse(self.service.change_password(self.account_id, "secret1", "secret2"))

    def test_existing_token_stays_valid(self) -> None:
        token = self.service.login("a@x.com", "secret1").token
        self.service.change_password(self.account_id, "secret1", "secret2")
        self.assertIsNotNone(self.tokens.verify(token))


class TestLookups(AuthServiceDbTestCase):
    """get_account_by_id / get_account_by_email only return active accounts."""

    def setUp(self) -> None:
        super().setUp()
        self.account_id = self.register(email="a@x.com").user.user_id

    def test_by_id(self) -> None:
        self.assertEqual(self.service.get_account_by_id(self.account_id).email, "a@x.com")
        self.assertIsNone(self.service.get_account_by_id(12345))

    def test_by_email_case_insensitive(self) -> None:
        self.assertEqual(self.service.get_account_by_email("A@x.Com").id, self.account_id)
        self.assertIsNone(self.service.get_account_by_email("missing@x.com"))

    def test_inactive_hidden(self) -> None:
        account = self.session.get(User, self.account_id)
        account.is_active = False
        self.session.commit()
        self.assertIsNone(self.service.get_account_by_id(self.account_id))
        self.assertIsNone(self.service.get_account_by_email("a@x.com"))

    def test_list_accounts(self) -> None:
        self.register(email="b@x.com")
        emails = [a.email for a in self.service.list_accounts()]
        self.assertEqual(emails, ["a@x.com", "b@x.com"])

    def test_profile_result(self) -> None:
        result = self.service.get_profile(self.account_id)
        self.assertEqual(result.outcome, AuthOutcome.OK)
        self.assertEqual(result.user.email, "a@x.com")

    def test_profile_of_missing_or_inactive_account_is_not_found(self) -> None:
        self.assertEqual(self.service.get_profile(12345).outcome, AuthOutcome.NOT_FOUND)
        account = self.session.get(User, self.account_id)
        account.is_active = False
        self.session.commit()
        result = self.service.get_profile(self.account_id)
        self.assertEqual(result.outcome, AuthOutcome.NOT_FOUND)
        self.assertEqual(result.message, "User not found")
        self.assertIsNone(result.user)

    def test_list_users_result(self) -> None:
        self.register(email="b@x.com")
        result = self.service.list_users()
        self.assertTrue(result.success)
        self.assertEqual([u.email for u in result.users], ["a@x.com", "b@x.com"])


class TestStoreFailures(unittest.TestCase):
    """Store errors never escape raw: results become INTERNAL_FAILURE, False, or AccountLookupError."""

    def setUp(self) -> None:
        self.store = MagicMock()
        self.service = AuthService(self.store, TokenService(token_config()))

    def test_register_insert_failure(self) -> None:
        self.store.find_by_email.return_value = None
        self.store.insert.side_effect = _db_error()
        result = self.service.register("Ada", "Lovelace", "a@x.com", "secret1")
        self.assertEqual(result.outcome, AuthOutcome.INTERNAL_FAILURE)
        self.assertEqual(result.message, "Registration failed")
        self.assertNotIn("locked", result.message)

    def test_register_lookup_failure(self) -> None:
        self.store.find_by_email.side_effect = _db_error()
        result = self.service.register("Ada", "Lovelace", "a@x.com", "secret1")
        self.assertEqual(result.outcome, AuthOutcome.INTERNAL_FAILURE)
        self.store.insert.assert_not_called()

    def test_register_checks_duplicates_with_normalized_email(self) -> None:
        self.store.find_by_email.return_value = make_account()
        result = self.service.register("Ada", "Lovelace", "  ADA@Example.com", "secret1")
        self.assertEqual(result.outcome, AuthOutcome.DUPLICATE_EMAIL)
        self.store.find_by_email.assert_called_once_with("ada@example.com")
        self.store.insert.assert_not_called()

    def test_login_update_failure(self) -> None:
        self.store.find_by_email.return_value = make_account(password_hash=hash_password("secret1"))
        self.store.update.side_effect = _db_error()
        result = self.service.login("ada@example.com", "secret1")
        self.assertEqual(result.outcome, AuthOutcome.INTERNAL_FAILURE)
        self.assertEqual(result.message, "Login failed")
        self.assertIsNone(result.token)

    def test_change_password_update_failure(self) -> None:
        self.store.find_by_id.return_value = make_account(password_hash=hash_password("secret1"))
        self.store.update.side_effect = _db_error()
        self.assertFalse(self.service.change_password(1, "secret1", "secret2"))

    def test_lookup_failure_raises_service_error(self) -> None:
        self.store.find_by_id.side_effect = _db_error()
        self.store.find_by_email.side_effect = _db_error()
        self.store.list_all.side_effect = _db_error()
        with self.assertRaises(AccountLookupError):
            self.service.get_account_by_id(1)
        with self.assertRaises(AccountLookupError):
            self.service.get_account_by_email("a@x.com")
        with self.assertRaises(AccountLookupError):
            self.service.list_accounts()

    def test_profile_and_listing_failures_are_internal(self) -> None:
        self.store.find_by_id.side_effect = _db_error()
        self.store.list_all.side_effect = _db_error()
        for result in (self.service.get_profile(1), self.service.list_users()):
            self.assertEqual(result.outcome, AuthOutcome.INTERNAL_FAILURE)
            self.assertNotIn("locked", result.message)


if __name__ == "__main__":
    unittest.main()
