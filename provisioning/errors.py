# provisioning/errors.py
# -*- coding: utf-8 -*-
"""
Category-level faults. Any of these aborts the whole run.

Row-level problems are never raised out of the phase loop; they become a
``Failure`` outcome recorded on the row.
"""

from typing import Optional


class ProvisioningError(Exception):
    """Base class for faults that abort a run."""

    def __init__(
        self,
        message: str,
        phase: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.phase = phase
        self.original_error = original_error
        super().__init__(message)


class QueryError(ProvisioningError):
    """A Pending-Work Query could not be prepared or executed."""


class StatusWriteError(ProvisioningError):
    """The outcome of a processed row could not be persisted."""


class HandlerResolutionError(ProvisioningError):
    """No usable handler implementation exists for an entity type."""


class IpReconciliationError(ProvisioningError):
    """IP address reconciliation failed; network-dependent state is unknown."""
