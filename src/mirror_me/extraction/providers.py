"""Registry of supported export providers."""

from enum import Enum
from typing import Optional

from .config import ProvidersConfig
from .errors import UnknownProviderError
from .rules import RuleSet, build_instagram_rules, build_reddit_rules


class Provider(str, Enum):
    """Supported export providers."""

    REDDIT = "reddit"
    INSTAGRAM = "instagram"

    @classmethod
    def parse(cls, name: str) -> "Provider":
        """Look up a provider by case-insensitive name.

        Raises:
            UnknownProviderError: If no provider has that name
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            supported = ", ".join(p.value for p in cls)
            raise UnknownProviderError(
                f"Unknown provider '{name}' (supported: {supported})", provider=name
            ) from None


def get_rule_set(provider: Provider | str, providers_config: Optional[ProvidersConfig] = None) -> RuleSet:
    """Build the rule set for a provider from its filename table."""
    if not isinstance(provider, Provider):
        provider = Provider.parse(provider)
    providers_config = providers_config or ProvidersConfig()

    if provider is Provider.REDDIT:
        return build_reddit_rules(providers_config.reddit)
    return build_instagram_rules(providers_config.instagram)
