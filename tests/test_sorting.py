import unittest

from tests.base import DatabaseTestCase, ts

from app.models.project import Project
from app.resources.projects import PROJECT_FIELDS
from app.resources.teams import TEAM_FIELDS
from app.services.query_errors import QueryValidationError
from app.services.sorting import SortClause, apply_sorting, collect_sort_violations, parse_sort


class SortExpressionTests(unittest.TestCase):
    allowed = {"name", "created_at", "status"}

    def _kinds(self, raw):
        with self.assertRaises(QueryValidationError) as ctx:
            parse_sort(raw, self.allowed)
        return ctx.exception.kinds

    def test_multi_key_sort_keeps_input_order(self):
        self.assertEqual(
            parse_sort("name:asc,created_at:desc", {"name", "created_at"}),
            [SortClause("name", "asc"), SortClause("created_at", "desc")],
        )

    def test_unknown_direction(self):
        self.assertEqual(self._kinds("status:sideways"), ["UnknownSortDirection"])

    def test_unknown_field(self):
        self.assertEqual(self._kinds("password:asc"), ["UnknownSortField"])

    def test_malformed_tokens(self):
        self.assertEqual(self._kinds("name"), ["MalformedSortToken"])
        self.assertEqual(self._kinds("name:asc:extra"), ["MalformedSortToken"])
        self.assertEqual(self._kinds("name:asc,"), ["MalformedSortToken"])

    def test_collects_all_token_violations(self):
        self.assertEqual(
            self._kinds("bogus:asc,name:up,created_at"),
            ["UnknownSortField", "UnknownSortDirection", "MalformedSortToken"],
        )

    def test_direction_is_case_insensitive_and_whitespace_tolerant(self):
        self.assertEqual(parse_sort(" name : ASC ", self.allowed), [SortClause("name", "asc")])

    def test_absent_sort_returns_none(self):
        self.assertIsNone(parse_sort(None, self.allowed))
        self.assertIsNone(parse_sort("   ", self.allowed))

    def test_restricted_directions(self):
        clauses, violations = collect_sort_violations("name:desc", self.allowed, ("asc",))
        self.assertEqual(clauses, [])
        self.assertEqual([v.kind for v in violations], ["UnknownSortDirection"])

    def test_non_sortable_fields_are_excluded(self):
        self.assertIn("name", TEAM_FIELDS.sortable_fields)
        self.assertNotIn("search", TEAM_FIELDS.sortable_fields)
        self.assertNotIn("id", PROJECT_FIELDS.sortable_fields)


class SortApplierTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.add_projects(
            {"name": "b", "status": "active", "created_at": ts(2024, 1, 2)},
            {"name": "a", "status": "inactive", "created_at": ts(2024, 1, 3)},
            {"name": "c", "status": "active", "created_at": ts(2024, 1, 1)},
            {"name": "a", "status": "active", "created_at": ts(2024, 1, 4)},
        )

    def _ordered(self, sort_spec):
        with self.SessionLocal() as db:
            q = apply_sorting(db.query(Project), Project, sort_spec, PROJECT_FIELDS)
            return [(r.name, r.status) for r in q.all()]

    def test_primary_key_then_tie_breaker(self):
        spec = parse_sort("name:asc,status:desc", PROJECT_FIELDS.sortable_fields)
        self.assertEqual(
            self._ordered(spec),
            [("a", "inactive"), ("a", "active"), ("b", "active"), ("c", "active")],
        )

    def test_default_is_created_at_desc(self):
        self.assertEqual(
            self._ordered(None),
            [("a", "active"), ("a", "inactive"), ("b", "active"), ("c", "active")],
        )

    def test_missing_direction_defaults_to_desc(self):
        self.assertEqual(
            [name for name, _ in self._ordered([SortClause("name", None)])],
            ["c", "b", "a", "a"],
        )


if __name__ == "__main__":
    unittest.main()
