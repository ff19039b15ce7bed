# spotfeed/services/classifier.py
from typing import Callable, Iterable, NamedTuple, Optional, Sequence, Tuple
from spotfeed.config import DEFAULT_PLACE_RULE, EXCLUDED_PLACE_TYPES, PLACE_RULE_TABLE


class PlaceRule(NamedTuple):
    capture_radius_m: int
    importance_score: int


TagPredicate = Callable[[str], bool]
RuleTable = Tuple[Tuple[TagPredicate, PlaceRule], ...]


def tag_equals(tag: str) -> TagPredicate:
    return lambda candidate: candidate == tag


def build_rule_table(entries: Iterable[Tuple[str, int, int]] = PLACE_RULE_TABLE) -> RuleTable:
    return tuple((tag_equals(tag), PlaceRule(radius, importance)) for tag, radius, importance in entries)


class PlaceClassifier:
    """
    Maps a directory record's category tags to a capture radius and importance.

    The record's own tag order decides: the first tag matched by any rule wins,
    regardless of where that rule sits in the table.
    """

    def __init__(self, rules: RuleTable, default: PlaceRule = PlaceRule(*DEFAULT_PLACE_RULE),
                 excluded_types: frozenset = EXCLUDED_PLACE_TYPES):
        self.rules = rules
        self.default = default
        self.excluded_types = excluded_types

    def is_excluded(self, tags: Sequence[str]) -> bool:
        return not self.excluded_types.isdisjoint(tags)

    def rule_for_tag(self, tag: str) -> Optional[PlaceRule]:
        for predicate, rule in self.rules:
            if predicate(tag):
                return rule
        return None

    def classify(self, tags: Sequence[str]) -> PlaceRule:
        for tag in tags:
            rule = self.rule_for_tag(tag)
            if rule is not None:
                return rule
        return self.default


default_classifier = PlaceClassifier(build_rule_table())
