import unittest
from datetime import timedelta
from unittest.mock import patch

from backend.db import InMemoryDbClient
from backend.quickref import QuickRefService
from shared.errors import (
    InvalidInputError,
    NotAuthenticatedError,
    NotFoundError,
    ServiceError,
)
from shared.types import AuthUser


class QuickRefServiceTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.service = QuickRefService(self.db)
        self.user = AuthUser(id="me")

    def test_create_blank_optionals_become_none(self):
        ref = self.service.create_ref(self.user, " grep ", content="", link="  ", tag="cli")
        self.assertEqual(ref.name, "grep")
        self.assertIsNone(ref.content)
        self.assertIsNone(ref.link)
        self.assertEqual(ref.tag, "cli")

    def test_name_required(self):
        with self.assertRaises(InvalidInputError):
            self.service.create_ref(self.user, "   ")

    def test_anonymous_cannot_create(self):
        with self.assertRaises(NotAuthenticatedError):
            self.service.create_ref(None, "x")

    def test_list_newest_first(self):
        first = self.service.create_ref(self.user, "first")
        second = self.service.create_ref(self.user, "second")
        self.assertEqual([r.id for r in self.service.list_refs()], [second.id, first.id])

    def test_partial_update_touches_only_given_fields(self):
        ref = self.service.create_ref(self.user, "ssh", content="ssh -i key host", tag="net")
        self.db.quick_refs[ref.id].updated_at = ref.updated_at - timedelta(minutes=1)
        updated = self.service.update_ref(self.user, ref.id, {"tag": "ops"})
        self.assertEqual(updated.tag, "ops")
        self.assertEqual(updated.content, "ssh -i key host")
        self.assertGreater(updated.updated_at, ref.updated_at - timedelta(minutes=1))

    def test_update_and_delete_missing(self):
        with self.assertRaises(NotFoundError):
            self.service.update_ref(self.user, "missing", {"name": "x"})
        with self.assertRaises(NotFoundError):
            self.service.delete_ref(self.user, "missing")

class QuickRefServiceFailureTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.service = QuickRefService(self.db)
        self.user = AuthUser(id="me")

    def test_create_failure_is_logged_and_generic(self):
        with patch.object(self.db, "create_quick_ref", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.quickref", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.create_ref(self.user, "grep")
        self.assertEqual(ctx.exception.message, "Failed to save quick ref")
        self.assertEqual(self.service.list_refs(), [])

    def test_update_and_delete_failures(self):
        ref = self.service.create_ref(self.user, "grep", tag="cli")
        with patch.object(self.db, "update_quick_ref", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.quickref", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.update_ref(self.user, ref.id, {"tag": "ops"})
        self.assertEqual(ctx.exception.message, "Failed to update quick ref")
        self.assertEqual(self.db.get_quick_ref(ref.id).tag, "cli")

        with patch.object(self.db, "delete_quick_ref", side_effect=RuntimeError("db down")):
            with self.assertLogs("backend.quickref", level="ERROR"):
                with self.assertRaises(ServiceError) as ctx:
                    self.service.delete_ref(self.user, ref.id)
        self.assertEqual(ctx.exception.message, "Failed to delete quick ref")
        self.assertIsNotNone(self.db.get_quick_ref(ref.id))



if __name__ == "__main__":
    unittest.main()
