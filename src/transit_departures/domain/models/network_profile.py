"""Network-specific heuristics, kept as configuration."""

import re
from dataclasses import dataclass, field

DEFAULT_PROVIDER_PRIORITY = ("TCAR", "TNI", "TAE")
DEFAULT_TEOR_LINE_PATTERN = r"^T\d+$"
UNKNOWN_PROVIDER_PRIORITY = 99


@dataclass(frozen=True)
class NetworkProfile:
    """Ranking and classification rules for one transit network."""

    provider_priority: tuple[str, ...] = DEFAULT_PROVIDER_PRIORITY
    teor_line_pattern: str = DEFAULT_TEOR_LINE_PATTERN
    external_only_providers: frozenset[str] = frozenset()
    timezone: str = "Europe/Paris"
    _teor_re: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_teor_re", re.compile(self.teor_line_pattern, re.IGNORECASE))

    def priority_of(self, provider: str) -> int:
        """Rank of a feed provider, lower first; unknown providers sort last."""
        try:
            return self.provider_priority.index(provider)
        except ValueError:
            return UNKNOWN_PROVIDER_PRIORITY

    def is_teor_line(self, short_name: str) -> bool:
        return bool(self._teor_re.match(short_name.strip()))

    def is_external_only(self, provider: str) -> bool:
        return provider in self.external_only_providers
