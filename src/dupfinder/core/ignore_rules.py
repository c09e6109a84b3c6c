"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/ignore_rules.py
Gitignore-style rules, read from per-directory ignore files and composed depth-first.

SYNTAX
------
  # comment          blank lines and comments are skipped
  *.log              no '/' inside: matches the name at any depth below the ignore file
  docs/*.md          a '/' inside (or a leading '/'): anchored to the ignore file's directory
  build/             trailing '/': directories only (and everything beneath them)
  !build/keep.txt    leading '!': re-include a path excluded by an earlier rule
  *  ?  [a-z]  **    wildcards; '*' and '?' never cross '/', '**' does

MATCHING
--------
A rule matches a path when it matches the path itself or any of its ancestor
directories. Rules are evaluated root-first, most specific last, and the last
matching rule decides. Paths are relative to the scan root and '/'-separated.
"""

import logging
import os
import posixpath
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from dupfinder.core.exceptions import IgnoreRuleError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IgnoreRule:
    pattern: str
    base: str  # directory holding the rule, relative to the scan root ('' for the root)
    negated: bool
    directory_only: bool
    regex: re.Pattern

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        """Check the path and each of its ancestors (within this rule's scope)."""
        if self.base:
            prefix = self.base + "/"
            if not rel_path.startswith(prefix):
                return False
            local = rel_path[len(prefix):]
        else:
            local = rel_path

        parts = local.split("/")
        for i in range(1, len(parts)):
            if self.regex.match("/".join(parts[:i])):
                return True

        if self.directory_only and not is_dir:
            return False
        return self.regex.match(local) is not None


def _translate(pattern: str) -> str:
    """Convert a glob body (no '!' prefix, no trailing '/') to a regex fragment."""
    out = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    out.append("(?:.*/)?")
                    i += 1
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            k = i + 1
            if k < n and pattern[k] in "!^":
                k += 1
            if k < n and pattern[k] == "]":
                k += 1
            j = pattern.find("]", k)
            if j == -1:
                raise IgnoreRuleError(pattern, "unterminated character class")
            body = pattern[i + 1:j].replace("\\", "\\\\").replace("[", "\\[")
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append(f"[{body}]")
            i = j + 1
            continue
        elif c == "\\":
            if i + 1 >= n:
                raise IgnoreRuleError(pattern, "trailing backslash")
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def parse_rule(line: str, base: str = "", source: str = "<patterns>") -> Optional[IgnoreRule]:
    """
    Parse one line of an ignore file.

    Returns:
        IgnoreRule, or None for blank lines and comments.
    Raises:
        IgnoreRuleError: if the line is not a valid rule.
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    negated = text.startswith("!")
    body = text[1:] if negated else text

    directory_only = body.endswith("/")
    body = body.rstrip("/")

    anchored = "/" in body
    body = body.lstrip("/")
    if not body:
        raise IgnoreRuleError(text, "empty pattern", source)

    try:
        fragment = _translate(body)
    except IgnoreRuleError as e:
        raise IgnoreRuleError(text, e.reason, source) from None

    prefix = "^" if anchored else "^(?:.*/)?"
    try:
        regex = re.compile(prefix + fragment + "$")
    except re.error as e:
        raise IgnoreRuleError(text, str(e), source) from e

    return IgnoreRule(
        pattern=text,
        base=base.strip("/"),
        negated=negated,
        directory_only=directory_only,
        regex=regex,
    )


class IgnoreRuleSet:
    """Ordered, immutable collection of rules; the last matching rule wins."""

    def __init__(self, rules: Iterable[IgnoreRule] = ()):
        self._rules = tuple(rules)

    @classmethod
    def from_lines(cls, lines: Iterable[str], base: str = "",
                   source: str = "<patterns>") -> 'IgnoreRuleSet':
        """Parse rules, skipping (and logging) malformed ones."""
        rules = []
        for line in lines:
            try:
                rule = parse_rule(line, base=base, source=source)
            except IgnoreRuleError as e:
                logger.warning(f"Skipping ignore rule: {e}")
                continue
            if rule is not None:
                rules.append(rule)
        return cls(rules)

    @classmethod
    def from_file(cls, path: str, base: str = "") -> 'IgnoreRuleSet':
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                lines = f.read().splitlines()
        except OSError as e:
            logger.warning(f"Could not read ignore file {path}: {e}")
            return cls()
        logger.debug(f"Loaded ignore file: {path}")
        return cls.from_lines(lines, base=base, source=path)

    def extend(self, other: 'IgnoreRuleSet') -> 'IgnoreRuleSet':
        """Return a new set with `other`'s rules applied after this set's rules."""
        if not other:
            return self
        if not self:
            return other
        return IgnoreRuleSet(self._rules + other._rules)

    @property
    def has_negations(self) -> bool:
        return any(rule.negated for rule in self._rules)

    def is_ignored(self, rel_path: str, is_dir: bool = False) -> bool:
        ignored = False
        for rule in self._rules:
            if rule.matches(rel_path, is_dir):
                ignored = not rule.negated
        return ignored

    def __len__(self):
        return len(self._rules)

    def __bool__(self):
        return bool(self._rules)

    def __iter__(self) -> Iterator[IgnoreRule]:
        return iter(self._rules)

    def __repr__(self):
        return f"<IgnoreRuleSet({len(self._rules)} rules)>"


class IgnoreRuleResolver:
    """
    Resolves the effective rule set for any directory under a scan root.

    The effective set for a directory is: configured patterns (anchored at the root),
    then the ignore files of the root, then of each ancestor down to the directory itself.
    """

    def __init__(self, root_dir: str, patterns: Sequence[str] = (),
                 ignore_file_names: Sequence[str] = ()):
        self.root_dir = root_dir
        self.ignore_file_names: List[str] = list(ignore_file_names)
        self._base = IgnoreRuleSet.from_lines(patterns, base="", source="<configured patterns>")
        self._cache: Dict[str, IgnoreRuleSet] = {}

    def rules_for(self, rel_dir: str) -> IgnoreRuleSet:
        """Effective rules for entries inside `rel_dir` ('' for the root)."""
        rel_dir = rel_dir.strip("/")
        cached = self._cache.get(rel_dir)
        if cached is not None:
            return cached

        if rel_dir:
            inherited = self.rules_for(posixpath.dirname(rel_dir))
        else:
            inherited = self._base

        rules = inherited.extend(self._load_directory(rel_dir))
        self._cache[rel_dir] = rules
        return rules

    def is_ignored(self, rel_path: str, is_dir: bool = False) -> bool:
        rel_path = rel_path.strip("/")
        return self.rules_for(posixpath.dirname(rel_path)).is_ignored(rel_path, is_dir)

    def _load_directory(self, rel_dir: str) -> IgnoreRuleSet:
        directory = os.path.join(self.root_dir, *rel_dir.split("/")) if rel_dir else self.root_dir
        loaded = IgnoreRuleSet()
        for file_name in self.ignore_file_names:
            candidate = os.path.join(directory, file_name)
            if os.path.isfile(candidate):
                loaded = loaded.extend(IgnoreRuleSet.from_file(candidate, base=rel_dir))
        return loaded
