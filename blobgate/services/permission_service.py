"""Permission checking: pure functions over a Policy snapshot.

This is the ONE place where access rules are evaluated. Everything else
(the gateway service, the verify endpoint) calls these functions.

Design:
    - A policy is a list of (prefix, read, write) rules
    - The most specific (longest) matching prefix determines the governing rule
    - Matching is a plain string-prefix test: "ab" is governed by prefix "a"
    - No matching rule = no access, for every operation
    - read is either ANONYMOUS or a role set; write is a role set
    - A write role also grants read
"""

from __future__ import annotations

from typing import AbstractSet, List, Optional

from ..schemas.policy import DirectoryRule, Policy

PATH_SEPARATOR = "/"


def rule_for(policy: Policy, key: str) -> Optional[DirectoryRule]:
    """Find the rule governing *key*.

    Returns the rule with the longest prefix that *key* starts with, or
    None if no rule matches. When the document repeats an identical prefix
    the first occurrence wins.
    """
    winner: Optional[DirectoryRule] = None
    for rule in policy.directories:
        if not key.startswith(rule.prefix):
            continue
        if winner is None or len(rule.prefix) > len(winner.prefix):
            winner = rule
    return winner


def _grants_read(rule: DirectoryRule, roles: AbstractSet[str]) -> bool:
    if rule.is_anonymous_read:
        return True
    return not roles.isdisjoint(rule.read_roles) or not roles.isdisjoint(rule.write)


def _grants_write(rule: DirectoryRule, roles: AbstractSet[str]) -> bool:
    return not roles.isdisjoint(rule.write)


def can_read(policy: Policy, key: str, roles: AbstractSet[str]) -> bool:
    """Check whether *roles* may read *key*.

    ANONYMOUS rules allow everyone, including callers with no token.
    Otherwise one of the caller's roles must appear under ``read`` or
    ``write`` of the governing rule.
    """
    rule = rule_for(policy, key)
    if rule is None:
        return False
    return _grants_read(rule, roles)


def can_write(policy: Policy, key: str, roles: AbstractSet[str]) -> bool:
    """Check whether *roles* may write or delete *key*.

    Anonymous write is never possible: ``write`` only holds role names.
    """
    rule = rule_for(policy, key)
    if rule is None:
        return False
    return _grants_write(rule, roles)


def normalize_prefix(prefix: str) -> str:
    """Ensure *prefix* ends with the path separator."""
    return prefix if prefix.endswith(PATH_SEPARATOR) else prefix + PATH_SEPARATOR


def visible_prefixes(policy: Policy, roles: AbstractSet[str]) -> List[str]:
    """Prefixes of every rule that lets *roles* read something.

    Normalized to end with "/", deduplicated and sorted.
    """
    return sorted({
        normalize_prefix(rule.prefix)
        for rule in policy.directories
        if _grants_read(rule, roles)
    })


def writable_prefixes(policy: Policy, roles: AbstractSet[str]) -> List[str]:
    """Prefixes of every rule that lets *roles* write.

    Normalized to end with "/", deduplicated and sorted.
    """
    return sorted({
        normalize_prefix(rule.prefix)
        for rule in policy.directories
        if _grants_write(rule, roles)
    })
