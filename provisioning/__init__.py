"""
Database-driven provisioning engine.

Scans the panel's entity tables for rows awaiting work, dispatches each
eligible row to the handler registered for its entity type and records
the outcome, phase by phase in dependency order.
"""

from provisioning.models import EntityType, Failure, Success, TaskRow, TaskStatus
from provisioning.processor import RunReport, TaskProcessor

__all__ = [
    "EntityType",
    "Failure",
    "RunReport",
    "Success",
    "TaskProcessor",
    "TaskRow",
    "TaskStatus",
]
