# scoring.py
"""Rule-based lead scoring.

A lead is scored by walking an ordered list of declarative rules. Each rule
reads one attribute of the lead, compares it with the rule's operand using one
of a fixed set of conditions, and contributes its points and reason when the
comparison matches. Type mismatches never raise: they simply do not match.

The rule list is loaded once from a JSON document (the packaged
``scoring_schema.json`` unless ``LEAD_SCORING_SCHEMA_PATH`` points elsewhere)
and validated up front, so malformed rules fail at startup rather than during
evaluation.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from .config import config
from .exceptions import ScoringSchemaError
from .logging_utils import get_logger
from .models import ConditionKind, Rule, ScoreResult, ScoringSchema

logger = get_logger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).parent / "scoring_schema.json"

ConditionEvaluator = Callable[[Any, Rule], bool]

# Registry mapping condition kinds to their evaluator functions
CONDITION_EVALUATORS: Dict[ConditionKind, ConditionEvaluator] = {}


def register_condition(kind: ConditionKind):
    """Decorator to register an evaluator for a condition kind.

    Args:
        kind: The condition the decorated function evaluates

    Example:
        @register_condition(ConditionKind.EQUALS)
        def _equals(lead_value, rule):
            ...
    """
    def decorator(func: ConditionEvaluator) -> ConditionEvaluator:
        CONDITION_EVALUATORS[kind] = func
        return func
    return decorator


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """Type-sensitive equality: ``1 == 1.0`` holds, ``1 == True`` and ``"1" == 1`` do not."""
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def as_text(value: Any) -> str:
    """Text form of a lead value used for regex matching."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(as_text(item) for item in value)
    return str(value)


@register_condition(ConditionKind.LESS_THAN)
def _less_than(lead_value: Any, rule: Rule) -> bool:
    return _is_number(lead_value) and _is_number(rule.value) and lead_value < rule.value


@register_condition(ConditionKind.GREATER_THAN)
def _greater_than(lead_value: Any, rule: Rule) -> bool:
    return _is_number(lead_value) and _is_number(rule.value) and lead_value > rule.value


@register_condition(ConditionKind.INCLUDES)
def _includes(lead_value: Any, rule: Rule) -> bool:
    if not isinstance(lead_value, (list, tuple)):
        return False
    return any(strict_equals(item, rule.value) for item in lead_value)


@register_condition(ConditionKind.REGEX)
def _regex(lead_value: Any, rule: Rule) -> bool:
    if lead_value is None or rule.pattern is None:
        return False
    return rule.pattern.search(as_text(lead_value)) is not None


@register_condition(ConditionKind.EQUALS)
def _equals(lead_value: Any, rule: Rule) -> bool:
    return strict_equals(lead_value, rule.value)


def build_schema(
    data: Union[Mapping[str, Any], Sequence[Any]],
    allow_unknown_conditions: bool = False,
) -> ScoringSchema:
    """Validate raw rule configuration into a ScoringSchema.

    Args:
        data: Either ``{"version": ..., "rules": [...]}`` or a bare list of rules
        allow_unknown_conditions: Keep rules whose condition has no evaluator;
            they are skipped with a warning at evaluation time

    Returns:
        The validated schema

    Raises:
        ScoringSchemaError: If a rule is missing fields, carries an invalid
            regex, or names an unknown condition (unless allowed)
    """
    if isinstance(data, (list, tuple)):
        data = {"rules": list(data)}
    if not isinstance(data, Mapping):
        raise ScoringSchemaError(
            f"scoring schema must be an object or a list of rules, got {type(data).__name__}"
        )

    try:
        schema = ScoringSchema.model_validate(data)
    except ValidationError as e:
        raise ScoringSchemaError(f"invalid scoring schema: {e}") from e

    unknown = schema.unknown_conditions()
    if unknown and not allow_unknown_conditions:
        raise ScoringSchemaError(
            f"unknown condition(s) in scoring schema: {', '.join(sorted(set(unknown)))}"
        )

    return schema


def load_scoring_schema(
    path: Optional[Union[str, Path]] = None,
    allow_unknown_conditions: Optional[bool] = None,
) -> ScoringSchema:
    """Load and validate the scoring schema from a JSON file.

    Args:
        path: JSON file to read. Defaults to LEAD_SCORING_SCHEMA_PATH, then the
            packaged schema.
        allow_unknown_conditions: Defaults to LEAD_SCORING_ALLOW_UNKNOWN_CONDITIONS.

    Returns:
        The validated ScoringSchema

    Raises:
        ScoringSchemaError: If the file cannot be read or is invalid
    """
    if path is None:
        path = config.LEAD_SCORING_SCHEMA_PATH or DEFAULT_SCHEMA_PATH
    if allow_unknown_conditions is None:
        allow_unknown_conditions = config.LEAD_SCORING_ALLOW_UNKNOWN_CONDITIONS

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ScoringSchemaError(f"cannot read scoring schema {path}: {e}") from e

    schema = build_schema(data, allow_unknown_conditions=allow_unknown_conditions)
    logger.info(
        "Scoring schema loaded",
        extra={"path": str(path), "version": schema.version, "rules": len(schema.rules)},
    )
    return schema


@lru_cache(maxsize=1)
def get_scoring_schema() -> ScoringSchema:
    """Return the process-wide scoring schema, loading it on first use."""
    return load_scoring_schema()


def _coerce_rules(
    rules: Optional[Union[ScoringSchema, Iterable[Union[Rule, Mapping[str, Any]]]]],
) -> List[Rule]:
    if rules is None:
        return get_scoring_schema().rules
    if isinstance(rules, ScoringSchema):
        return rules.rules

    coerced = []
    for rule in rules:
        if isinstance(rule, Rule):
            coerced.append(rule)
            continue
        try:
            coerced.append(Rule.model_validate(rule))
        except ValidationError as e:
            raise ScoringSchemaError(f"invalid scoring rule {rule!r}: {e}") from e
    return coerced


def evaluate_rules(
    lead: Mapping[str, Any],
    rules: Optional[Union[ScoringSchema, Iterable[Union[Rule, Mapping[str, Any]]]]] = None,
) -> ScoreResult:
    """Score a lead against an ordered list of rules.

    Args:
        lead: Lead record; any mapping of field names to values
        rules: Rules to apply, as a ScoringSchema, Rule objects or raw dicts.
            Defaults to the process-wide schema.

    Returns:
        ScoreResult with the summed points and the reasons of every matching
        rule, in rule order

    Raises:
        TypeError: If lead is not a mapping
        ScoringSchemaError: If a raw rule dict is malformed
    """
    if not isinstance(lead, Mapping):
        raise TypeError(f"lead must be a mapping, got {type(lead).__name__}")

    score = 0
    reasons: List[str] = []

    for rule in _coerce_rules(rules):
        evaluator = CONDITION_EVALUATORS.get(rule.kind) if rule.kind else None
        if evaluator is None:
            logger.warning(
                f'Unknown condition "{rule.condition}" in scoring schema',
                extra={"field": rule.field, "condition": rule.condition},
            )
            continue

        if evaluator(lead.get(rule.field), rule):
            score += rule.points
            reasons.append(rule.reason)

    return ScoreResult(score=score, reasons=reasons)
