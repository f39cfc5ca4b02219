"""
Label selector evaluation for Podboard.

The Kubernetes API only understands equality and set-based selectors. Podboard
adds a regex operator, `=~`, which has to be evaluated locally against the
labels of every pod in the namespace.

Grammar (comma separated clauses, all must match):
- `key=~pattern`: the label must exist and `re.search(pattern, value)` must match
- `key=value` or `key==value`: the label must exist and equal value
- anything else (`!=`, `in (...)`, bare keys): unsupported, the pod is rejected

An invalid regex or an unsupported clause never fails the request; it only
makes every pod fail to match, and a warning is logged.

Example:
    ```python
    selector = LabelSelector.parse("app=~nginx.*,tier=frontend")
    selector.matches({"app": "nginx-1", "tier": "frontend"})  # True
    ```
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern

from .constants import REGEX_SELECTOR_OPERATOR

log = logging.getLogger('podboard')


def is_regex_selector(selector: Optional[str]) -> bool:
    """Return True when the selector uses the `=~` operator anywhere."""
    return bool(selector) and REGEX_SELECTOR_OPERATOR in selector


@dataclass(frozen=True)
class Clause:
    """
    A single selector clause.

    Attributes:
        key: Label key
        value: Expected value, or the regex source for `=~`
        pattern: Compiled regex for `=~` clauses
        valid: False for unsupported clauses and invalid regexes
    """
    key: str
    value: str
    pattern: Optional[Pattern] = None
    valid: bool = True

    def matches(self, labels: Dict[str, str]) -> bool:
        if not self.valid or self.key not in labels:
            return False
        if self.pattern is not None:
            return self.pattern.search(labels[self.key]) is not None
        return labels[self.key] == self.value


def parse_clause(text: str) -> Clause:
    """Parse one clause; problems yield an invalid clause and a warning."""
    if REGEX_SELECTOR_OPERATOR in text:
        key, pattern_text = (part.strip() for part in text.split(REGEX_SELECTOR_OPERATOR, 1))
        try:
            pattern = re.compile(pattern_text)
        except re.error as e:
            log.warning(f"[selector] invalid regex pattern '{pattern_text}': {e}")
            return Clause(key=key, value=pattern_text, valid=False)
        return Clause(key=key, value=pattern_text, pattern=pattern)

    if "=" in text and "!=" not in text:
        key, value = text.split("=", 1)
        if value.startswith("="):
            value = value[1:]
        return Clause(key=key.strip(), value=value.strip())

    log.warning(f"[selector] unsupported selector format '{text}'")
    return Clause(key=text, value="", valid=False)


@dataclass(frozen=True)
class LabelSelector:
    """A parsed selector: the conjunction of its clauses."""
    clauses: List[Clause]

    @classmethod
    def parse(cls, selector: str) -> 'LabelSelector':
        clauses = []
        for text in selector.split(","):
            text = text.strip()
            if text:
                clauses.append(parse_clause(text))
        return cls(clauses=clauses)

    def matches(self, labels: Optional[Dict[str, str]]) -> bool:
        # pods without labels never match
        if not labels:
            return False
        return all(clause.matches(labels) for clause in self.clauses)


def matches_selector(labels: Optional[Dict[str, str]], selector: str) -> bool:
    """
    Check whether pod labels satisfy a selector.

    Args:
        labels: Pod labels (None or empty for unlabeled pods)
        selector: Selector string, e.g. "app=~nginx.*,env=dev|staging"

    Returns:
        bool: True if every clause matches
    """
    return LabelSelector.parse(selector).matches(labels)
