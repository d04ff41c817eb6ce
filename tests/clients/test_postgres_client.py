"""Tests for PostgresClient - pooled PostgreSQL access returning row dicts."""

from unittest.mock import patch
from uuid import UUID

import pytest

from clients.postgres_client import PostgresClient

SAMPLE_ID = UUID("00000000-0000-0000-0000-000000000001")


@pytest.fixture
def offline_client():
    """Client whose pool is never opened."""
    with patch("clients.postgres_client.psycopg2.pool.ThreadedConnectionPool"):
        client = PostgresClient("postgresql://offline/test")
        yield client
        PostgresClient._connection_pools.pop("postgresql://offline/test", None)


class TestParamConversion:
    """UUIDs are sent as strings, at any nesting depth."""

    def test_none_passthrough(self, offline_client):
        assert offline_client._convert_params(None) is None

    def test_tuple_uuid_converted(self, offline_client):
        assert offline_client._convert_params((SAMPLE_ID, 5)) == (str(SAMPLE_ID), 5)

    def test_dict_and_list_converted(self, offline_client):
        params = {"ids": [SAMPLE_ID], "name": "acme"}

        assert offline_client._convert_params(params) == {"ids": [str(SAMPLE_ID)], "name": "acme"}

    def test_pool_shared_per_url(self, offline_client):
        with patch("clients.postgres_client.psycopg2.pool.ThreadedConnectionPool") as pool_cls:
            PostgresClient("postgresql://offline/test")

        pool_cls.assert_not_called()


class TestTransactions:
    """Commit/rollback around each statement, with a fake pool."""

    def test_commits_and_returns_connection(self, offline_client):
        pool = PostgresClient._connection_pools["postgresql://offline/test"]
        conn = pool.getconn.return_value
        cur = conn.cursor.return_value.__enter__.return_value
        cur.description = None

        assert offline_client.execute("UPDATE videos SET is_active = true") == []

        conn.commit.assert_called_once()
        pool.putconn.assert_called_once_with(conn)

    def test_failed_statement_rolls_back(self, offline_client):
        pool = PostgresClient._connection_pools["postgresql://offline/test"]
        conn = pool.getconn.return_value
        conn.cursor.return_value.__enter__.return_value.execute.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            offline_client.execute("SELECT 1")

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()
        pool.putconn.assert_called_once_with(conn)


@pytest.mark.integration
class TestExecuteMethods:
    """Query execution methods against a real database."""

    def test_execute_returns_list_of_dicts(self, db):
        """execute() returns list of row dicts."""
        results = db.execute("SELECT 1 as num, 'hello' as word")
        assert results == [{"num": 1, "word": "hello"}]

    def test_execute_empty_returns_empty_list(self, db):
        """No matching rows returns [], not None."""
        results = db.execute("SELECT 1 WHERE false")
        assert results == []

    def test_execute_single_returns_dict(self, db):
        """execute_single() returns first row as dict."""
        result = db.execute_single("SELECT 42 as answer")
        assert result == {"answer": 42}

    def test_execute_single_no_rows_returns_none(self, db):
        """execute_single() returns None for empty result."""
        result = db.execute_single("SELECT 1 WHERE false")
        assert result is None

    def test_execute_scalar_returns_value(self, db):
        """execute_scalar() returns first value of first row."""
        result = db.execute_scalar("SELECT 'test'")
        assert result == "test"

    def test_execute_scalar_no_rows_returns_none(self, db):
        """execute_scalar() returns None for empty result."""
        result = db.execute_scalar("SELECT 1 WHERE false")
        assert result is None

    def test_uuid_params_accepted(self, db):
        result = db.execute_scalar("SELECT %s::uuid", (SAMPLE_ID,))
        assert result == SAMPLE_ID

    def test_ping(self, db):
        assert db.ping() is True
