"""Sinks for orphaned identities left by a failed signup compensation."""

import logging

from ....core.exceptions.auth import CompensationFailure

logger = logging.getLogger(__name__)


class LoggingReconciliationSink:
    """Default sink: a CRITICAL log line an operator can alert on.
    
    Does not retry the delete. Pass another ``ReconciliationSinkProtocol``
    to queue orphans for a reconciliation job.
    """
    
    async def report(self, failure: CompensationFailure) -> None:
        logger.critical(
            f"Orphaned identity {failure.identity_id} needs reconciliation: "
            f"profile creation failed ({failure.original_error!r}) and "
            f"compensating delete failed ({failure.compensation_error!r})",
            extra={"identity_id": failure.identity_id, "error_code": failure.error_code},
        )


class InMemoryReconciliationSink:
    """Collects failures in memory, for local runs and tests."""
    
    def __init__(self):
        self.failures = []
    
    async def report(self, failure: CompensationFailure) -> None:
        self.failures.append(failure)
