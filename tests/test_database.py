"""Tests for warden.core.database engine construction and connectivity check."""

import threading
import unittest
from unittest.mock import MagicMock

from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from warden.core.database import build_engine, check_db_connected
from warden.models import Base, Role
from warden.stores import SqlRoleStore


class TestBuildEngine(unittest.TestCase):
    def test_in_memory_sqlite_is_shared_across_sessions(self) -> None:
        engine = build_engine("sqlite://")
        self.assertIsInstance(engine.pool, StaticPool)
        Base.metadata.create_all(engine)
        self.assertIn("users", inspect(engine).get_table_names())
        with engine.connect() as conn:
            self.assertIn("roles", inspect(conn).get_table_names())

    def test_sqlite_session_usable_from_another_thread(self) -> None:
        engine = build_engine("sqlite://")
        Base.metadata.create_all(engine)
        errors: list[Exception] = []

        def worker() -> None:
            try:
                with Session(engine) as session:
                    SqlRoleStore(session).save(Role(name="ROLE_USER"))
            except Exception as e:
                errors.append(e)

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()
        self.assertEqual(errors, [])
        with Session(engine) as session:
            self.assertTrue(SqlRoleStore(session).exists_by_name("ROLE_USER"))

    def test_file_sqlite_is_not_static_pool(self) -> None:
        engine = build_engine("sqlite:///warden-test.db")
        self.assertNotIsInstance(engine.pool, StaticPool)


class TestCheckDbConnected(unittest.TestCase):
    def test_connected(self) -> None:
        with Session(build_engine("sqlite://")) as session:
            self.assertTrue(check_db_connected(session))

    def test_disconnected(self) -> None:
        session = MagicMock()
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
        self.assertFalse(check_db_connected(session))
