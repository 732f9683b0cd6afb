# src/lead_radar/tests/test_scoring.py
"""
Unit tests for Lead Radar rule-based scoring.

Tests cover:
- Each condition kind and its type-mismatch behavior
- Score summation and reason ordering
- Unknown conditions skipped with a warning
- Purity and idempotence
- Boundary validation of leads and raw rules
- Scoring schema loading and load-time validation
- Condition registry
"""
import copy
import json
import logging
import pytest

from lead_radar.exceptions import ScoringSchemaError
from lead_radar.models import ConditionKind, Rule, ScoringSchema
from lead_radar.scoring import (
    CONDITION_EVALUATORS,
    DEFAULT_SCHEMA_PATH,
    as_text,
    build_schema,
    evaluate_rules,
    load_scoring_schema,
    strict_equals,
)


def make_rule(field, condition, value, points=1, reason=None):
    return {
        "field": field,
        "condition": condition,
        "value": value,
        "points": points,
        "reason": reason or f"{field} {condition} {value}",
    }


@pytest.fixture
def acme_lead():
    """The reference lead used in scoring examples."""
    return {
        "name": "Acme Co",
        "employees": 30,
        "foundedYear": 2021,
        "industry": "Software",
        "careersPageText": "We're hiring a software engineer",
    }


@pytest.fixture
def acme_rules():
    """A hiring rule followed by a company-size rule."""
    return [
        make_rule("careersPageText", "regex", "hiring", 5, "Actively hiring"),
        make_rule("employees", "lessThan", 50, 3, "Small company"),
    ]


# ==============================================================================
# Condition Tests
# ==============================================================================


class TestNumericConditions:
    """Tests for lessThan and greaterThan."""

    @pytest.mark.unit
    def test_less_than_matches(self):
        """Test lessThan matches smaller numbers."""
        result = evaluate_rules({"employees": 30}, [make_rule("employees", "lessThan", 50)])
        assert result.score == 1

    @pytest.mark.unit
    def test_less_than_boundary_does_not_match(self):
        """Test lessThan is strict."""
        result = evaluate_rules({"employees": 50}, [make_rule("employees", "lessThan", 50)])
        assert result.score == 0

    @pytest.mark.unit
    def test_greater_than_matches_floats(self):
        """Test greaterThan works across int and float."""
        result = evaluate_rules({"rating": 4.5}, [make_rule("rating", "greaterThan", 4)])
        assert result.score == 1

    @pytest.mark.unit
    @pytest.mark.parametrize("lead_value", ["thirty", "30", None, True, [30]])
    def test_non_numeric_lead_value_never_matches(self, lead_value):
        """Test type mismatches are non-matches, not errors."""
        rules = [
            make_rule("employees", "lessThan", 50),
            make_rule("employees", "greaterThan", 0),
        ]
        result = evaluate_rules({"employees": lead_value}, rules)
        assert result.score == 0
        assert result.reasons == []

    @pytest.mark.unit
    def test_non_numeric_rule_value_never_matches(self):
        """Test a string operand on the rule side never matches."""
        result = evaluate_rules({"employees": 30}, [make_rule("employees", "lessThan", "50")])
        assert result.score == 0

    @pytest.mark.unit
    def test_absent_field_never_matches(self):
        """Test a missing field is simply a non-match."""
        result = evaluate_rules({}, [make_rule("employees", "lessThan", 50)])
        assert result.score == 0


class TestIncludesCondition:
    """Tests for includes."""

    @pytest.mark.unit
    def test_includes_list_member(self):
        """Test membership in a list matches."""
        result = evaluate_rules(
            {"reviews": ["great", "bad"]}, [make_rule("reviews", "includes", "bad")]
        )
        assert result.score == 1

    @pytest.mark.unit
    def test_includes_on_string_does_not_match(self):
        """Test a string is not treated as a sequence."""
        result = evaluate_rules({"reviews": "bad"}, [make_rule("reviews", "includes", "bad")])
        assert result.score == 0

    @pytest.mark.unit
    def test_includes_is_type_sensitive(self):
        """Test membership uses strict equality."""
        rules = [make_rule("codes", "includes", 1)]
        assert evaluate_rules({"codes": [True, "1"]}, rules).score == 0
        assert evaluate_rules({"codes": [1.0]}, rules).score == 1


class TestRegexCondition:
    """Tests for regex."""

    @pytest.mark.unit
    def test_regex_is_case_insensitive(self):
        """Test regex matching ignores case."""
        lead = {"careersPageText": "We're Hiring a Software Engineer"}
        result = evaluate_rules(lead, [make_rule("careersPageText", "regex", "hiring")])
        assert result.score == 1

    @pytest.mark.unit
    def test_regex_absent_value_does_not_match(self):
        """Test None and missing values never match, even for match-all patterns."""
        rules = [make_rule("careersPageText", "regex", ".*")]
        assert evaluate_rules({}, rules).score == 0
        assert evaluate_rules({"careersPageText": None}, rules).score == 0

    @pytest.mark.unit
    def test_regex_on_non_string_uses_text_form(self):
        """Test numbers, booleans and lists are matched by their text form."""
        assert evaluate_rules({"foundedYear": 2021},
                              [make_rule("foundedYear", "regex", "^202")]).score == 1
        assert evaluate_rules({"justMoved": True},
                              [make_rule("justMoved", "regex", "^true$")]).score == 1
        assert evaluate_rules({"careers": ["Driver", "Join our team"]},
                              [make_rule("careers", "regex", "join our")]).score == 1


class TestEqualsCondition:
    """Tests for equals."""

    @pytest.mark.unit
    def test_equals_matches_same_value(self):
        """Test equal values match."""
        result = evaluate_rules({"industry": "Software"}, [make_rule("industry", "equals", "Software")])
        assert result.score == 1

    @pytest.mark.unit
    def test_equals_is_type_sensitive(self):
        """Test equals does not coerce between types."""
        assert evaluate_rules({"justMoved": 1}, [make_rule("justMoved", "equals", True)]).score == 0
        assert evaluate_rules({"employees": "30"}, [make_rule("employees", "equals", 30)]).score == 0
        assert evaluate_rules({"employees": 30.0}, [make_rule("employees", "equals", 30)]).score == 1

    @pytest.mark.unit
    def test_equals_none_matches_absent_field(self):
        """Test a null operand matches a missing field."""
        assert evaluate_rules({}, [make_rule("websiteUri", "equals", None)]).score == 1


class TestHelpers:
    """Tests for strict_equals and as_text."""

    @pytest.mark.unit
    def test_strict_equals(self):
        """Test strict equality semantics."""
        assert strict_equals(1, 1.0)
        assert strict_equals(True, True)
        assert not strict_equals(1, True)
        assert not strict_equals("a", ["a"])

    @pytest.mark.unit
    def test_as_text(self):
        """Test text forms used for regex matching."""
        assert as_text(False) == "false"
        assert as_text(["a", 1, True]) == "a,1,true"
        assert as_text(3.5) == "3.5"


# ==============================================================================
# Evaluation Tests
# ==============================================================================


class TestEvaluateRules:
    """Tests for score summation, ordering and robustness."""

    @pytest.mark.unit
    def test_reference_lead_scores_eight(self, acme_lead, acme_rules):
        """Test the hiring and size rules sum to 8 with reasons in rule order."""
        result = evaluate_rules(acme_lead, acme_rules)

        assert result.score == 8
        assert result.reasons == ["Actively hiring", "Small company"]

    @pytest.mark.unit
    def test_reasons_follow_rule_order(self, acme_lead, acme_rules):
        """Test reasons are emitted in rule order, not sorted."""
        result = evaluate_rules(acme_lead, list(reversed(acme_rules)))
        assert result.reasons == ["Small company", "Actively hiring"]

    @pytest.mark.unit
    def test_negative_points_and_duplicate_reasons(self):
        """Test negative points subtract and duplicate reasons are kept."""
        rules = [
            make_rule("employees", "greaterThan", 500, -5, "Too large"),
            make_rule("employees", "greaterThan", 1000, -5, "Too large"),
            make_rule("industry", "equals", "Software", 2, "Target industry"),
        ]
        result = evaluate_rules({"employees": 2000, "industry": "Software"}, rules)

        assert result.score == -8
        assert result.reasons == ["Too large", "Too large", "Target industry"]

    @pytest.mark.unit
    def test_score_is_sum_of_matching_rules(self):
        """Test score equals the sum of points and reasons count equals matches."""
        rules = [
            make_rule("a", "equals", 1, 2),
            make_rule("b", "equals", 1, 3),
            make_rule("c", "equals", 1, 7),
        ]
        result = evaluate_rules({"a": 1, "c": 1}, rules)

        assert result.score == 9
        assert len(result.reasons) == 2

    @pytest.mark.unit
    def test_unknown_condition_skipped_with_warning(self, caplog):
        """Test unknown conditions do not match and processing continues."""
        rules = [
            make_rule("name", "startsWith", "A", 10, "Starts with A"),
            make_rule("employees", "lessThan", 50, 3, "Small company"),
        ]
        with caplog.at_level(logging.WARNING, logger="lead_radar.scoring"):
            result = evaluate_rules({"name": "Acme", "employees": 30}, rules)

        assert result.score == 3
        assert result.reasons == ["Small company"]
        assert 'Unknown condition "startsWith"' in caplog.text

    @pytest.mark.unit
    def test_evaluation_is_pure_and_idempotent(self, acme_lead, acme_rules):
        """Test repeated evaluation gives identical results and leaves inputs untouched."""
        lead_before = copy.deepcopy(acme_lead)
        rules_before = copy.deepcopy(acme_rules)

        first = evaluate_rules(acme_lead, acme_rules)
        second = evaluate_rules(acme_lead, acme_rules)

        assert first == second
        assert acme_lead == lead_before
        assert acme_rules == rules_before

    @pytest.mark.unit
    def test_accepts_schema_and_rule_objects(self, acme_lead, acme_rules):
        """Test rules may be given as a ScoringSchema or Rule instances."""
        schema = build_schema(acme_rules)
        rule_objects = [Rule.model_validate(r) for r in acme_rules]

        assert evaluate_rules(acme_lead, schema).score == 8
        assert evaluate_rules(acme_lead, rule_objects).score == 8

    @pytest.mark.unit
    def test_empty_rules_score_zero(self, acme_lead):
        """Test an empty rule list yields an empty result."""
        result = evaluate_rules(acme_lead, [])
        assert result.score == 0
        assert result.reasons == []

    @pytest.mark.unit
    @pytest.mark.parametrize("lead", [None, "Acme", ["employees", 30]])
    def test_non_mapping_lead_raises(self, lead, acme_rules):
        """Test a non-mapping lead fails fast with TypeError."""
        with pytest.raises(TypeError):
            evaluate_rules(lead, acme_rules)

    @pytest.mark.unit
    def test_malformed_raw_rule_raises(self, acme_lead):
        """Test a raw rule missing fields raises ScoringSchemaError."""
        with pytest.raises(ScoringSchemaError):
            evaluate_rules(acme_lead, [{"field": "employees", "condition": "lessThan"}])


# ==============================================================================
# Schema Loading Tests
# ==============================================================================


class TestSchemaLoading:
    """Tests for build_schema and load_scoring_schema."""

    @pytest.mark.unit
    def test_packaged_schema_loads(self):
        """Test the packaged default schema is valid."""
        schema = load_scoring_schema(DEFAULT_SCHEMA_PATH, allow_unknown_conditions=False)

        assert len(schema.rules) > 0
        assert schema.unknown_conditions() == []

    @pytest.mark.unit
    def test_packaged_schema_scores_reference_lead(self, acme_lead):
        """Test the packaged rules reward the reference lead."""
        schema = load_scoring_schema(DEFAULT_SCHEMA_PATH)
        result = evaluate_rules(acme_lead, schema)

        assert result.reasons[:2] == ["Actively hiring", "Small company"]
        assert result.score == 10

    @pytest.mark.unit
    def test_load_from_file(self, tmp_path, acme_rules):
        """Test loading a custom schema file with a version."""
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"version": "test-1", "rules": acme_rules}))

        schema = load_scoring_schema(path)

        assert schema.version == "test-1"
        assert [r.reason for r in schema.rules] == ["Actively hiring", "Small company"]

    @pytest.mark.unit
    def test_load_bare_list(self, tmp_path, acme_rules):
        """Test a bare JSON list of rules is accepted."""
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(acme_rules))

        assert len(load_scoring_schema(path).rules) == 2

    @pytest.mark.unit
    def test_missing_file_raises(self, tmp_path):
        """Test an unreadable file raises ScoringSchemaError."""
        with pytest.raises(ScoringSchemaError):
            load_scoring_schema(tmp_path / "missing.json")

    @pytest.mark.unit
    def test_invalid_json_raises(self, tmp_path):
        """Test malformed JSON raises ScoringSchemaError."""
        path = tmp_path / "rules.json"
        path.write_text("{not json")
        with pytest.raises(ScoringSchemaError):
            load_scoring_schema(path)

    @pytest.mark.unit
    def test_invalid_regex_fails_at_load(self):
        """Test an invalid regex pattern is rejected when the schema is built."""
        with pytest.raises(ScoringSchemaError) as exc_info:
            build_schema([make_rule("careersPageText", "regex", "[unclosed")])
        assert "invalid regex pattern" in str(exc_info.value)

    @pytest.mark.unit
    def test_unknown_condition_rejected_by_default(self):
        """Test unknown conditions fail at load unless allowed."""
        rules = [make_rule("name", "startsWith", "A")]

        with pytest.raises(ScoringSchemaError) as exc_info:
            build_schema(rules)
        assert "startsWith" in str(exc_info.value)

        schema = build_schema(rules, allow_unknown_conditions=True)
        assert isinstance(schema, ScoringSchema)
        assert schema.rules[0].kind is None

    @pytest.mark.unit
    def test_non_object_schema_rejected(self):
        """Test a scalar document is rejected."""
        with pytest.raises(ScoringSchemaError):
            build_schema("rules")


class TestConditionRegistry:
    """Tests for the condition evaluator registry."""

    @pytest.mark.unit
    def test_every_condition_kind_registered(self):
        """Test each ConditionKind has an evaluator."""
        assert set(CONDITION_EVALUATORS) == set(ConditionKind)
