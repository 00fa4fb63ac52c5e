"""
Send a signed GitHub delivery to a running instance.

Useful for smoke checks without configuring a real repository webhook:

    GITHUB_WEBHOOK_SECRET=... python scripts/send_github_webhook.py push \
        --repo octo/board --branch feature/login
    python scripts/send_github_webhook.py push --repo octo/board --branch main \
        --message "fixes #42"
    python scripts/send_github_webhook.py pull_request --repo octo/board \
        --head feature/login
    python scripts/send_github_webhook.py ping

Exits non-zero when the response is not 2xx.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import uuid
from pathlib import Path

import httpx

# Allow running from any directory
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from hydianflow.core.logging import get_logger, setup_logging  # noqa: E402
from hydianflow.domain.github.signature import compute_signature  # noqa: E402


logger = get_logger(__name__)


def _base_url() -> str:
    port = os.environ.get("PORT", "8000")
    return os.environ.get("BASE_URL", f"http://127.0.0.1:{port}").rstrip("/")


def _timeout_seconds() -> float:
    return float(os.environ.get("SMOKE_TIMEOUT_SECONDS", "10"))


def sign_payload(secret: str, body: bytes) -> str:
    """Header value for X-Hub-Signature-256"""
    return f"sha256={compute_signature(secret, body)}"


def build_headers(event: str, secret: str, body: bytes, delivery_id: str | None = None) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-GitHub-Event": event,
        "X-GitHub-Delivery": delivery_id or str(uuid.uuid4()),
        "X-Hub-Signature-256": sign_payload(secret, body),
    }


def push_payload(repo: str, branch: str, default_branch: str, messages: list[str]) -> dict:
    return {
        "ref": f"refs/heads/{branch}",
        "repository": {"full_name": repo, "default_branch": default_branch},
        "commits": [{"message": m} for m in messages],
    }


def pull_request_payload(repo: str, head: str, base: str, default_branch: str, merged: bool = True) -> dict:
    return {
        "action": "closed",
        "repository": {"full_name": repo, "default_branch": default_branch},
        "pull_request": {
            "merged": merged,
            "base": {"ref": base},
            "head": {"ref": head},
        },
    }


def _build_payload(args: argparse.Namespace) -> dict:
    if args.event == "push":
        return push_payload(args.repo, args.branch, args.default_branch, args.message or [])
    if args.event == "pull_request":
        return pull_request_payload(args.repo, args.head, args.base or args.default_branch, args.default_branch)
    return {"zen": "Keep it logically awesome.", "hook_id": 1}


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("event", choices=["push", "pull_request", "ping"])
    parser.add_argument("--repo", default="octo/board")
    parser.add_argument("--default-branch", default="main")
    parser.add_argument("--branch", default="main", help="pushed branch")
    parser.add_argument("--message", action="append", help="commit message (repeatable)")
    parser.add_argument("--head", default="feature/demo", help="pull request head branch")
    parser.add_argument("--base", default=None, help="pull request base branch")
    parser.add_argument("--delivery-id", default=None, help="reuse an id to test deduplication")
    parser.add_argument("--path", default="/api/v1/webhooks/github")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    setup_logging(level=os.environ.get("LOG_LEVEL", "INFO"), json_format=False)
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    secret = os.environ.get("GITHUB_WEBHOOK_SECRET", "")
    if not secret:
        logger.error("GITHUB_WEBHOOK_SECRET is not set")
        return 2

    body = json.dumps(_build_payload(args)).encode("utf-8")
    headers = build_headers(args.event, secret, body, args.delivery_id)
    url = f"{_base_url()}{args.path}"

    with httpx.Client(timeout=_timeout_seconds()) as client:
        resp = client.post(url, content=body, headers=headers)

    logger.info(
        f"{args.event} -> {resp.status_code}",
        extra_data={"delivery_id": headers["X-GitHub-Delivery"], "body": (resp.text or "")[:500]},
    )
    print(resp.text)
    return 0 if resp.status_code // 100 == 2 else 1


if __name__ == "__main__":
    raise SystemExit(main())
