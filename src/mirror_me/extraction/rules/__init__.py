"""Provider field-extraction rules."""

from .base import Rule, RuleSet, build_rule_set
from .reddit import build_reddit_rules
from .instagram import build_instagram_rules

__all__ = [
    'Rule',
    'RuleSet',
    'build_rule_set',
    'build_reddit_rules',
    'build_instagram_rules',
]
