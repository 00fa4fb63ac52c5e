"""
Domain Services
"""
from hydianflow.domain.services.delivery_log_service import DeliveryLogService
from hydianflow.domain.services.github_sync_service import GitHubSyncService
from hydianflow.domain.services.task_service import TaskService
from hydianflow.domain.services.task_transition_service import TaskTransitionService

__all__ = [
    "DeliveryLogService",
    "GitHubSyncService",
    "TaskService",
    "TaskTransitionService",
]
