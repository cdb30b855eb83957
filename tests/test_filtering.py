import unittest

from sqlalchemy.orm import Session

from tests.base import DatabaseTestCase, ts

from app.models.project import Project
from app.models.team import Team
from app.resources.projects import PROJECT_FIELDS
from app.resources.teams import TEAM_FIELDS
from app.services.field_rules import FieldRule, field_rules, operators
from app.services.filter_validation import ValidatedFilter, validate_filters
from app.services.filtering import apply_filters, build_predicate, compile_filters
from app.services.query_errors import QueryValidationError


def _sql(predicate) -> str:
    return str(predicate.compile(compile_kwargs={"literal_binds": True}))


class QueryTranslatorTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.add_projects(
            {"name": "Alpha", "owner_id": 1, "status": "active", "description": None, "created_at": ts(2023, 12, 31, 23, 59, 59)},
            {"name": "Beta", "owner_id": 2, "status": "inactive", "description": "100% done", "created_at": ts(2024, 1, 1, 0, 0, 0)},
            {"name": "Gamma", "owner_id": 3, "status": "active", "description": "1000 done", "created_at": ts(2024, 1, 31, 23, 59, 59)},
            {"name": "Delta", "owner_id": 4, "status": "active", "description": "under_score", "created_at": ts(2024, 2, 1, 0, 0, 0)},
        )

    def _names(self, raw_filters, model=Project, config=PROJECT_FIELDS):
        filters = validate_filters(raw_filters, config)
        with self.SessionLocal() as db:
            q = apply_filters(db.query(model), model, filters, config)
            return sorted(row.name for row in q.all())

    def test_scalar_shorthand_produces_same_predicate_as_eq(self):
        shorthand = validate_filters({"status": "active"}, PROJECT_FIELDS)
        explicit = validate_filters({"status": {"eq": "active"}}, PROJECT_FIELDS)
        self.assertEqual(
            _sql(build_predicate(Project, shorthand, PROJECT_FIELDS)),
            _sql(build_predicate(Project, explicit, PROJECT_FIELDS)),
        )
        self.assertEqual(self._names({"status": "active"}), ["Alpha", "Delta", "Gamma"])

    def test_ne_and_null_handling(self):
        self.assertEqual(self._names({"status": {"ne": "active"}}), ["Beta"])
        self.assertEqual(self._names({"description": {"eq": None}}), ["Alpha"])
        self.assertEqual(self._names({"description": {"ne": None}}), ["Beta", "Delta", "Gamma"])

    def test_comparison_operators(self):
        self.assertEqual(self._names({"owner_id": {"gt": 2}}), ["Delta", "Gamma"])
        self.assertEqual(self._names({"owner_id": {"gte": "2", "lt": 4}}), ["Beta", "Gamma"])
        self.assertEqual(self._names({"owner_id": {"lte": 1}}), ["Alpha"])

    def test_membership_operators(self):
        self.assertEqual(self._names({"name": {"in": ["Alpha", "Gamma"]}}), ["Alpha", "Gamma"])
        self.assertEqual(self._names({"name": {"nin": ["Alpha", "Gamma"]}}), ["Beta", "Delta"])

    def test_like_is_substring_and_escapes_wildcards(self):
        self.assertEqual(self._names({"name": {"like": "amm"}}), ["Gamma"])
        self.assertEqual(self._names({"description": {"like": "0%"}}), ["Beta"])
        self.assertEqual(self._names({"description": {"like": "r_s"}}), ["Delta"])

    def test_like_on_status_matches_fragment(self):
        self.assertEqual(self._names({"status": {"like": "inact"}}), ["Beta"])

    def test_text_values_are_coerced_to_column_type(self):
        self.assertEqual(self._names({"owner_id": {"in": ["1", "3"]}}), ["Alpha", "Gamma"])
        self.assertEqual(self._names({"owner_id": "2"}), ["Beta"])

    def test_uncoercible_value_is_a_validation_error(self):
        filters = validate_filters({"owner_id": "two"}, PROJECT_FIELDS)
        with self.assertRaises(QueryValidationError) as ctx:
            build_predicate(Project, filters, PROJECT_FIELDS)
        self.assertEqual(ctx.exception.violations[0].field, "owner_id")
        self.assertEqual(ctx.exception.kinds, ["InvalidValueShape"])

    def test_compile_filters_collects_every_value_error(self):
        filters = validate_filters({"owner_id": {"gt": 1, "in": ["1", "x"]}, "name": "Beta"}, PROJECT_FIELDS)
        filters.append(ValidatedFilter(field="owner_id", operator="eq", value="two", raw="two"))
        _, violations = compile_filters(Project, filters, PROJECT_FIELDS)
        self.assertEqual([(v.field, v.operator) for v in violations], [("owner_id", "in"), ("owner_id", "eq")])

    def test_between_includes_both_full_days(self):
        self.assertEqual(
            self._names({"created_at": {"between": "2024-01-01,2024-01-31"}}),
            ["Beta", "Gamma"],
        )

    def test_filters_are_combined_with_and(self):
        self.assertEqual(self._names({"status": "active", "owner_id": {"gte": 3}}), ["Delta", "Gamma"])

    def test_no_filters_leaves_query_untouched(self):
        with self.SessionLocal() as db:
            q = db.query(Project)
            self.assertIs(apply_filters(q, Project, [], PROJECT_FIELDS), q)

    def test_unparseable_between_at_translation_is_a_validation_error(self):
        bad = [ValidatedFilter(field="created_at", operator="between", value="2024-01-01,someday", raw=None)]
        with self.assertRaises(QueryValidationError) as ctx:
            build_predicate(Project, bad, PROJECT_FIELDS)
        self.assertEqual(ctx.exception.kinds, ["InvalidValueShape"])
        self.assertEqual(ctx.exception.status_code, 422)


class PredicateOverrideTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.add_teams(
            {"name": "Platform", "description": "infra and tooling", "members_count": 5},
            {"name": "Mobile", "description": "ios and android", "members_count": 3},
            {"name": "Web", "description": "platform frontend", "members_count": 8},
        )

    def test_override_receives_raw_value_once(self):
        calls = []

        def filter_name(model, conditions):
            calls.append(conditions)
            return model.name == "Mobile"

        config = field_rules("teams", FieldRule("name", operators(("eq", "like")), predicate=filter_name))
        conditions = {"eq": "ignored", "like": "also ignored"}
        filters = validate_filters({"name": conditions}, config)
        with self.SessionLocal() as db:
            rows = apply_filters(db.query(Team), Team, filters, config).all()
        self.assertEqual([r.name for r in rows], ["Mobile"])
        self.assertEqual(len(calls), 1)
        self.assertIs(calls[0], conditions)

    def test_override_receives_scalar_unmodified(self):
        calls = []

        def filter_name(model, conditions):
            calls.append(conditions)
            return model.members_count > 4

        config = field_rules("teams", FieldRule("name", operators(("eq",)), predicate=filter_name))
        filters = validate_filters({"name": "whatever"}, config)
        build_predicate(Team, filters, config)
        self.assertEqual(calls, ["whatever"])

    def test_team_search_matches_name_or_description(self):
        filters = validate_filters({"search": "latform"}, TEAM_FIELDS)
        with self.SessionLocal() as db:
            rows = apply_filters(db.query(Team), Team, filters, TEAM_FIELDS).all()
        self.assertEqual(sorted(r.name for r in rows), ["Platform", "Web"])

    def test_team_search_reads_eq_condition(self):
        filters = validate_filters({"search": {"eq": "Mobile"}}, TEAM_FIELDS)
        with self.SessionLocal() as db:
            rows = apply_filters(db.query(Team), Team, filters, TEAM_FIELDS).all()
        self.assertEqual([r.name for r in rows], ["Mobile"])

    def test_team_search_combines_with_other_filters(self):
        filters = validate_filters({"search": {"like": "latform"}, "members_count": {"gt": 6}}, TEAM_FIELDS)
        with Session(self.engine) as db:
            rows = apply_filters(db.query(Team), Team, filters, TEAM_FIELDS).all()
        self.assertEqual([r.name for r in rows], ["Web"])


if __name__ == "__main__":
    unittest.main()
