"""
Tests for GitHub payload decoding
"""
import json

import pytest

from hydianflow.core.exceptions import ErrorCode, ValidationException
from hydianflow.domain.github.events import (
    PullRequestEvent,
    PushEvent,
    is_supported_event,
    parse_event,
)
from tests.conftest import pull_request_payload, push_payload


def _body(payload) -> bytes:
    return json.dumps(payload).encode()


class TestParsePush:

    @pytest.mark.unit
    def test_fields(self):
        event = parse_event("push", _body(push_payload("feature/login", messages=["a", "b"])))
        assert isinstance(event, PushEvent)
        assert event.branch == "feature/login"
        assert event.repo_full_name == "o/r"
        assert event.default_branch == "main"
        assert event.is_default_branch is False
        assert event.commit_messages == ["a", "b"]

    @pytest.mark.unit
    def test_default_branch(self):
        event = parse_event("push", _body(push_payload("main")))
        assert event.is_default_branch is True

    @pytest.mark.unit
    def test_tag_ref_has_no_branch(self):
        payload = push_payload("main")
        payload["ref"] = "refs/tags/v1.0.0"
        event = parse_event("push", _body(payload))
        assert event.branch == ""
        assert event.is_default_branch is False

    @pytest.mark.unit
    def test_missing_and_null_fields_default_to_empty(self):
        event = parse_event("push", b'{"repository": {"full_name": null}, "commits": null}')
        assert event.branch == ""
        assert event.repo_full_name == ""
        assert event.commit_messages == []

    @pytest.mark.unit
    def test_unknown_fields_are_ignored(self):
        payload = push_payload("main")
        payload["pusher"] = {"name": "octocat"}
        payload["head_commit"] = {"id": "abc"}
        assert isinstance(parse_event("push", _body(payload)), PushEvent)

    @pytest.mark.unit
    def test_invalid_json(self):
        with pytest.raises(ValidationException) as exc_info:
            parse_event("push", b"{not json")
        assert exc_info.value.error_code == ErrorCode.PUSH_PARSE
        assert exc_info.value.status_code == 400

    @pytest.mark.unit
    def test_wrong_shape(self):
        with pytest.raises(ValidationException):
            parse_event("push", b'{"commits": "not a list"}')


class TestParsePullRequest:

    @pytest.mark.unit
    def test_merged_into_default(self):
        event = parse_event("pull_request", _body(pull_request_payload("feature/login")))
        assert isinstance(event, PullRequestEvent)
        assert event.is_merge is True
        assert event.head_ref == "feature/login"
        assert event.base_ref == "main"
        assert event.targets_default_branch is True

    @pytest.mark.unit
    def test_closed_without_merge(self):
        event = parse_event("pull_request", _body(pull_request_payload("f", merged=False)))
        assert event.is_merge is False

    @pytest.mark.unit
    def test_opened(self):
        event = parse_event("pull_request", _body(pull_request_payload("f", action="opened")))
        assert event.is_merge is False

    @pytest.mark.unit
    def test_other_base(self):
        event = parse_event("pull_request", _body(pull_request_payload("f", base="develop")))
        assert event.targets_default_branch is False

    @pytest.mark.unit
    def test_missing_default_branch_accepts_any_base(self):
        payload = pull_request_payload("f", base="develop")
        payload["repository"].pop("default_branch")
        event = parse_event("pull_request", _body(payload))
        assert event.targets_default_branch is True

    @pytest.mark.unit
    def test_invalid_json(self):
        with pytest.raises(ValidationException) as exc_info:
            parse_event("pull_request", b"")
        assert exc_info.value.error_code == ErrorCode.PR_PARSE


class TestUnsupportedEvents:

    @pytest.mark.unit
    @pytest.mark.parametrize("event_type", ["star", "ping", "issues", "workflow_run", ""])
    def test_passthrough(self, event_type):
        assert is_supported_event(event_type) is False
        # Body is never decoded for unsupported types
        assert parse_event(event_type, b"\xff not json") is None
