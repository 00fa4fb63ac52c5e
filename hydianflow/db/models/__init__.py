"""
Database Models
"""
from hydianflow.db.models.task import Task, TaskStatus
from hydianflow.db.models.webhook_delivery import WebhookDelivery

__all__ = [
    "Task",
    "TaskStatus",
    "WebhookDelivery",
]
