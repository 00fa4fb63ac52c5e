"""
Branch name matching.

Branch hints are hierarchical: a task with hint ``feature`` follows every
branch under ``feature/``. All comparisons are trimmed and case-insensitive.
"""
from collections.abc import Iterable


def normalize_branch(name: str | None) -> str:
    return (name or "").strip().lower()


def branch_contains(hint: str | None, branch: str | None) -> bool:
    """
    True when ``hint`` equals ``branch`` or is one of its ancestor paths.

    >>> branch_contains("feature", "feature/login")
    True
    >>> branch_contains("featur", "feature/login")
    False
    """
    hint = normalize_branch(hint)
    if not hint:
        return False
    return hint in hint_candidates(branch)


def branch_prefixes(branch: str | None) -> list[str]:
    """
    Every ancestor path of ``branch``, shortest first, including itself.

    ``"feature/x/y"`` → ``["feature", "feature/x", "feature/x/y"]``.
    Case is preserved; callers normalize.
    """
    parts = [p for p in (branch or "").strip().strip("/").split("/") if p]
    return ["/".join(parts[: i + 1]) for i in range(len(parts))]


def unique_normalized(names: Iterable[str]) -> list[str]:
    """Trim + lower-case, drop empties and duplicates, keep first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for name in names:
        key = normalize_branch(name)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(key)
    return out


def hint_candidates(branch: str | None) -> list[str]:
    """Normalized hints that contain ``branch``; the IN-list for a bulk update."""
    return unique_normalized(branch_prefixes(branch))
