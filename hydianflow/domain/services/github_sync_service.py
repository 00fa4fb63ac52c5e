"""
GitHub Sync Service - turns push and pull_request events into task moves.

Push to a feature branch:   todo → in_progress for tasks whose hint contains the branch.
Push to the default branch: three independent passes, each todo/in_progress → done:
    1. explicit references in commit messages (``#42``, ``task:42``)
    2. branches named by merge commits, with all their ancestor paths
    3. tasks whose hint contains the pushed branch itself
Merged pull request into the default branch: todo/in_progress → done for
tasks whose hint contains the head branch.

Each pass commits on its own. The returned count is the sum over passes, so a
task matched by two passes is counted twice.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from hydianflow.core.clock import utcnow
from hydianflow.core.logging import get_logger, log_async_operation
from hydianflow.domain.github.branches import branch_prefixes, hint_candidates, unique_normalized
from hydianflow.domain.github.events import PullRequestEvent, PushEvent
from hydianflow.domain.github.references import extract_merge_branches, extract_task_refs
from hydianflow.domain.services.task_transition_service import TaskTransitionService

logger = get_logger(__name__)


class GitHubSyncService:
    """Applies GitHub events to tasks"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.transitions = TaskTransitionService(db)

    @log_async_operation("github_push_sync")
    async def handle_push(self, event: PushEvent) -> int:
        repo = event.repo_full_name
        branch = event.branch
        if not repo or not branch:
            return 0

        now = utcnow()

        if not event.is_default_branch:
            updated = await self.transitions.start_matching_branch(repo, hint_candidates(branch), now)
            logger.info(
                "Push to feature branch",
                extra_data={"repo": repo, "branch": branch, "started": updated},
            )
            return updated

        messages = event.commit_messages
        total = 0

        task_ids: list[int] = []
        for message in messages:
            task_ids.extend(extract_task_refs(message))
        by_reference = await self.transitions.complete_by_ids(repo, sorted(set(task_ids)), now)
        total += by_reference

        merged_prefixes: list[str] = []
        for message in messages:
            for merged_branch in extract_merge_branches(message):
                merged_prefixes.extend(branch_prefixes(merged_branch))
        by_merge = await self.transitions.complete_matching_branch(
            repo, unique_normalized(merged_prefixes), now
        )
        total += by_merge

        by_branch = await self.transitions.complete_matching_branch(repo, hint_candidates(branch), now)
        total += by_branch

        logger.info(
            "Push to default branch",
            extra_data={
                "repo": repo,
                "branch": branch,
                "commits": len(messages),
                "referenced_ids": len(set(task_ids)),
                "completed_by_reference": by_reference,
                "completed_by_merge": by_merge,
                "completed_by_branch": by_branch,
            },
        )
        return total

    @log_async_operation("github_pull_request_sync")
    async def handle_pull_request(self, event: PullRequestEvent) -> int:
        if not event.is_merge:
            return 0

        repo = event.repo_full_name
        base = event.base_ref
        head = event.head_ref
        if not repo or not base or not head:
            return 0

        if not event.targets_default_branch:
            logger.info(
                "Merged pull request outside default branch",
                extra_data={"repo": repo, "base": base, "default_branch": event.default_branch},
            )
            return 0

        updated = await self.transitions.complete_matching_branch(repo, hint_candidates(head), utcnow())
        logger.info(
            "Merged pull request",
            extra_data={"repo": repo, "head": head, "completed": updated},
        )
        return updated
