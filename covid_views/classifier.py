"""
Location classification.

OWID tables mix countries with aggregate rows. Countries carry a continent;
aggregates (continents, income groups, "World", unions) leave it empty. Only
the continents are wanted on continent-level views, so empty-continent rows
are checked against a list of exclusion patterns.
"""
import enum
from dataclasses import dataclass
from typing import Iterable, List, Optional

from covid_views import config


class LocationClass(enum.Enum):
    COUNTRY = "country"
    AGGREGATE = "aggregate"
    EXCLUDED = "excluded"


@dataclass(frozen=True)
class PatternRule:
    kind: str
    text: str

    KINDS = ("prefix", "suffix", "contains")

    def __post_init__(self):
        if self.kind not in self.KINDS:
            raise ValueError(f"Unknown pattern kind '{self.kind}'. Use one of {self.KINDS}.")
        if not self.text:
            raise ValueError("Pattern text must not be empty.")

    @classmethod
    def from_like(cls, pattern: str) -> 'PatternRule':
        """Build a rule from a SQL LIKE pattern: 'w%', '%income' or '%ion%'."""
        starts = pattern.startswith('%')
        ends = pattern.endswith('%') and len(pattern) > 1
        text = pattern.strip('%')
        if not text or '%' in text or '_' in text:
            raise ValueError(f"Unsupported LIKE pattern '{pattern}'.")
        if starts and ends:
            return cls("contains", text)
        if starts:
            return cls("suffix", text)
        if ends:
            return cls("prefix", text)
        raise ValueError(f"LIKE pattern '{pattern}' has no wildcard.")

    def as_like(self) -> str:
        if self.kind == "prefix":
            return f"{self.text}%"
        if self.kind == "suffix":
            return f"%{self.text}"
        return f"%{self.text}%"

    def matches(self, location: str, case_sensitive: bool = False) -> bool:
        text = self.text
        if not case_sensitive:
            location = location.casefold()
            text = text.casefold()
        if self.kind == "prefix":
            return location.startswith(text)
        if self.kind == "suffix":
            return location.endswith(text)
        return text in location


def default_rules() -> List[PatternRule]:
    return [PatternRule.from_like(p) for p in config.not_continent_patterns()]


class Classifier:
    def __init__(self, rules: Optional[Iterable[PatternRule]] = None,
                 case_sensitive: Optional[bool] = None):
        self.rules = list(default_rules() if rules is None else rules)
        # case-insensitive by default, like LIKE under SQL Server's default collation,
        # so the "w%" rule catches "World"
        self.case_sensitive = config.pattern_case_sensitive() if case_sensitive is None else case_sensitive

    def __repr__(self) -> str:
        patterns = ", ".join(r.as_like() for r in self.rules)
        return f"<Classifier [{patterns}] case_sensitive={self.case_sensitive}>"

    def is_excluded(self, location: str) -> bool:
        return any(r.matches(location, self.case_sensitive) for r in self.rules)

    def classify(self, location: str, continent: Optional[str] = None) -> LocationClass:
        if continent:
            return LocationClass.COUNTRY
        if self.is_excluded(location):
            return LocationClass.EXCLUDED
        return LocationClass.AGGREGATE

    def mask(self, locations: List[str], continents: List[Optional[str]],
             wanted: LocationClass) -> List[bool]:
        return [self.classify(loc, cont) is wanted for loc, cont in zip(locations, continents)]
