"""
GitHub event payloads.

Only ``push`` and ``pull_request`` are decoded, and only the fields the task
sync needs. Every other event type is passed through untouched so new GitHub
events never break the hook.
"""
from typing import Optional, Union

from pydantic import BaseModel, ValidationError

from hydianflow.core.exceptions import ErrorCode, ValidationException

PUSH_EVENT = "push"
PULL_REQUEST_EVENT = "pull_request"

_BRANCH_REF_PREFIX = "refs/heads/"


class Repository(BaseModel):
    full_name: Optional[str] = None
    default_branch: Optional[str] = None


class Commit(BaseModel):
    message: Optional[str] = None


class GitRef(BaseModel):
    ref: Optional[str] = None


class PullRequest(BaseModel):
    merged: Optional[bool] = None
    base: GitRef = GitRef()
    head: GitRef = GitRef()


class _RepositoryEvent(BaseModel):
    repository: Repository = Repository()

    @property
    def repo_full_name(self) -> str:
        return (self.repository.full_name or "").strip()

    @property
    def default_branch(self) -> str:
        return (self.repository.default_branch or "").strip()


class PushEvent(_RepositoryEvent):
    """``push`` payload"""

    ref: Optional[str] = None
    commits: Optional[list[Commit]] = None

    @property
    def branch(self) -> str:
        """Pushed branch name; empty for tags and other non-branch refs"""
        ref = (self.ref or "").strip()
        if not ref.startswith(_BRANCH_REF_PREFIX):
            return ""
        return ref[len(_BRANCH_REF_PREFIX):]

    @property
    def is_default_branch(self) -> bool:
        return bool(self.default_branch) and self.branch == self.default_branch

    @property
    def commit_messages(self) -> list[str]:
        return [c.message or "" for c in (self.commits or [])]


class PullRequestEvent(_RepositoryEvent):
    """``pull_request`` payload"""

    action: Optional[str] = None
    pull_request: PullRequest = PullRequest()

    @property
    def base_ref(self) -> str:
        return (self.pull_request.base.ref or "").strip()

    @property
    def head_ref(self) -> str:
        return (self.pull_request.head.ref or "").strip()

    @property
    def is_merge(self) -> bool:
        return self.action == "closed" and bool(self.pull_request.merged)

    @property
    def targets_default_branch(self) -> bool:
        # Payloads without a default branch are trusted as-is
        return not self.default_branch or self.base_ref == self.default_branch


GitHubEvent = Union[PushEvent, PullRequestEvent]

_PARSERS: dict[str, tuple[type[BaseModel], ErrorCode]] = {
    PUSH_EVENT: (PushEvent, ErrorCode.PUSH_PARSE),
    PULL_REQUEST_EVENT: (PullRequestEvent, ErrorCode.PR_PARSE),
}


def is_supported_event(event_type: str) -> bool:
    return event_type in _PARSERS


def parse_event(event_type: str, body: bytes) -> Optional[GitHubEvent]:
    """
    Decode ``body`` for a supported event type.

    Returns None for unsupported types. Raises ValidationException when the
    body of a supported type cannot be decoded.
    """
    parser = _PARSERS.get(event_type)
    if parser is None:
        return None

    model, error_code = parser
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        first = errors[0]["msg"] if errors else str(e)
        raise ValidationException(
            message=f"invalid {event_type} payload: {first}",
            error_code=error_code,
            details={"errors": len(errors)},
        ) from e
