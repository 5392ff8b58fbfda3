"""Unit tests for the navigation resolver.

Tests first-match ordering, defaults and form completion.
"""

import pytest

from formflow.schemas.form import ComparisonOp, FieldType, NavigationRule, Step
from formflow.services.comparison import EvaluationError
from formflow.services.navigation import NoNextStep, is_terminal, resolve_next_step


class TestResolveNextStep:
    """Tests for resolve_next_step."""

    def test_first_matching_rule_wins(self, age_step):
        """Both rules match an adult; the first authored one is used."""
        assert resolve_next_step(age_step, {"age": 25}) == "adult"

    def test_later_rule_when_earlier_fails(self, age_step):
        assert resolve_next_step(age_step, {"age": 10}) == "minor"

    def test_reordered_rules_change_result(self, age_step):
        reordered = age_step.model_copy(
            update={"next_step_condition": list(reversed(age_step.next_step_condition))}
        )
        assert resolve_next_step(reordered, {"age": 25}) == "minor"

    def test_default_when_no_rule_matches(self, age_step):
        step = age_step.model_copy(update={"default_next_step": "end"})
        assert resolve_next_step(step, {"age": -1}) == "end"

    def test_no_next_step_when_nothing_applies(self, age_step):
        result = resolve_next_step(age_step, {})
        assert result == NoNextStep(step_id="age")
        assert is_terminal(result)

    def test_step_without_rules_uses_default(self):
        step = Step(id="s1", title="One", default_next_step="s2")
        assert resolve_next_step(step, {}) == "s2"
        assert not is_terminal("s2")

    def test_last_step_is_terminal(self):
        step = Step(id="done", title="Done")
        assert isinstance(resolve_next_step(step, {}), NoNextStep)

    def test_numeric_equality_with_field_types(self):
        step = Step(
            id="count",
            title="Count",
            next_step_condition=[
                NavigationRule(field_id="kids", comparison=ComparisonOp.EQUALS, value=0, go_to_step="no_kids"),
            ],
            default_next_step="kids_details",
        )
        assert resolve_next_step(step, {"kids": "0"}) == "kids_details"
        assert resolve_next_step(step, {"kids": "0"}, {"kids": FieldType.NUMBER}) == "no_kids"

    def test_unknown_comparison_is_error_not_completion(self):
        bad_rule = NavigationRule.model_construct(
            field_id="x", comparison="matches", value="y", go_to_step="other"
        )
        step = Step.model_construct(
            id="s1", title="One", elements=[], next_step_condition=[bad_rule], default_next_step=None
        )
        with pytest.raises(EvaluationError):
            resolve_next_step(step, {"x": "y"})
