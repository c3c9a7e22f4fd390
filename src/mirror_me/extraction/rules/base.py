"""Rule and rule-set types shared by every provider."""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Generic, Iterable, Mapping, Optional, TypeVar

from mirror_me.common import ConfigurationError

from ..values import JsonValue

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class Rule(Generic[R]):
    """Pure transformation of (record, parsed entry) into an updated record."""
    match_name: str
    apply: Callable[[R, JsonValue], R]


@dataclass(frozen=True)
class RuleSet(Generic[R]):
    """
    Everything the orchestrator needs to know about one provider.

    Attributes:
        provider: Provider name
        hierarchical: Parse every entry as JSON (True) or as delimited text
            (False); None picks the parser from each entry's extension
        new_record: Factory for the empty record a run starts from
        rules: Read-only mapping of canonical filename to rule
    """
    provider: str
    hierarchical: Optional[bool]
    new_record: Callable[[], R]
    rules: Mapping[str, Rule[R]]

    def dispatch(self, name: str) -> Optional[Rule[R]]:
        """Return the rule for an entry basename, None when nothing matches."""
        return self.rules.get(name)


def build_rule_set(
    provider: str,
    hierarchical: Optional[bool],
    new_record: Callable[[], R],
    rules: Iterable[Rule[R]],
) -> RuleSet[R]:
    """
    Assemble a rule set, rejecting two rules for the same filename.

    Raises:
        ConfigurationError: If a filename is claimed by more than one rule
    """
    table = {}
    for rule in rules:
        if rule.match_name in table:
            raise ConfigurationError(
                f"Duplicate {provider} rule for {rule.match_name}",
                provider=provider,
                match_name=rule.match_name,
            )
        table[rule.match_name] = rule
    logger.debug(f"Built {provider} rule set with {len(table)} rules")
    return RuleSet(
        provider=provider,
        hierarchical=hierarchical,
        new_record=new_record,
        rules=MappingProxyType(table),
    )
