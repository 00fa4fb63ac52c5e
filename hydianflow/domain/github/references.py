"""
Commit message scanning.

Two independent signals are read from messages pushed to the default branch:
explicit task references (``#42``, ``task:42``) and branches named by merge
commits.
"""
import re

# Task.id is a signed BIGINT
_MAX_TASK_ID = 2**63 - 1

_TASK_REF_RE = re.compile(r"(?:#|task:)\s*(\d+)", re.IGNORECASE)

_MERGE_PR_RE = re.compile(r"Merge pull request #\d+ from [^/\s]+/(\S+)", re.IGNORECASE)
_MERGE_BRANCH_RE = re.compile(
    r"""Merge (?:remote-tracking )?branch ['"]([^'"]+)['"]""", re.IGNORECASE
)


def extract_task_refs(message: str) -> list[int]:
    """All task ids referenced in ``message``, in order of appearance."""
    ids: list[int] = []
    for match in _TASK_REF_RE.finditer(message or ""):
        task_id = int(match.group(1))
        if 0 < task_id <= _MAX_TASK_ID:
            ids.append(task_id)
    return ids


def extract_merge_branches(message: str) -> list[str]:
    """
    Branches named by a merge commit message.

    ``Merge pull request #7 from octo/feature/login`` → ``["feature/login"]``
    ``Merge branch 'feature/x'`` → ``["feature/x"]``
    """
    out: list[str] = []
    for pattern in (_MERGE_PR_RE, _MERGE_BRANCH_RE):
        match = pattern.search(message or "")
        if match:
            out.append(match.group(1))
    return out
