"""Tests for pruning expired refresh tokens (services.refresh_tokens and the prune_tokens CLI)."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

from blog_api import prune_tokens
from blog_api.models import RefreshToken
from blog_api.services.credentials import create_user
from blog_api.services.refresh_tokens import purge_expired_refresh_tokens, save_refresh_token
from tests.support import make_session


class TestPurgeWithMockSession(unittest.TestCase):
    """purge_expired_refresh_tokens deletes by cutoff and commits once."""

    def test_returns_deleted_count(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 2
        deleted = purge_expired_refresh_tokens(session, datetime.now(UTC))
        self.assertEqual(deleted, 2)
        session.commit.assert_called_once()
        session.add.assert_not_called()

    def test_nothing_to_delete(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 0
        self.assertEqual(purge_expired_refresh_tokens(session, datetime.now(UTC)), 0)
        session.commit.assert_called_once()


class TestPurgeAgainstDatabase(unittest.TestCase):
    """Only rows whose expiry lies before the cutoff are removed."""

    def test_keeps_live_tokens(self) -> None:
        db = make_session()
        try:
            user = create_user(db, "pruner", "prune@example.com", "password123", rounds=4)
            now = datetime.now(UTC)
            save_refresh_token(db, "old.token.one", user.id, now - timedelta(days=1))
            save_refresh_token(db, "live.token.two", user.id, now + timedelta(days=1))
            self.assertEqual(purge_expired_refresh_tokens(db, now), 1)
            remaining = [row.token for row in db.query(RefreshToken).all()]
            self.assertEqual(remaining, ["live.token.two"])
            self.assertEqual(purge_expired_refresh_tokens(db, now), 0)
        finally:
            db.close()


class TestPruneCli(unittest.TestCase):
    """The CLI returns 0 on success and 1 when the purge fails."""

    def test_exit_codes(self) -> None:
        session = MagicMock()
        with patch.object(prune_tokens, "build_engine"), patch.object(
            prune_tokens, "build_session_factory", return_value=lambda: session
        ), patch.object(prune_tokens, "purge_expired_refresh_tokens", return_value=3):
            self.assertEqual(prune_tokens.main(), 0)
        session.close.assert_called_once()

        session = MagicMock()
        with patch.object(prune_tokens, "build_engine"), patch.object(
            prune_tokens, "build_session_factory", return_value=lambda: session
        ), patch.object(
            prune_tokens, "purge_expired_refresh_tokens", side_effect=RuntimeError("db down")
        ):
            self.assertEqual(prune_tokens.main(), 1)
        session.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
