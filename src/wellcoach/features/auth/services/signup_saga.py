"""Signup saga: identity first, then profile, with compensation."""

import asyncio
import logging
from typing import Optional

from ....core.exceptions.auth import (
    CompensationFailure,
    IdentityCreationError,
    ProfileCreationError,
    UserAlreadyExistsError,
)
from ...profiles.entities.profile import ProfileRole
from ..entities.identity import Identity, SignupRequest
from ..entities.protocols import (
    IdentityGatewayProtocol,
    ProfileStoreProtocol,
    ReconciliationSinkProtocol,
)
from ..entities.signup_result import SignupResult
from .reconciliation import LoggingReconciliationSink

logger = logging.getLogger(__name__)


class SignupSaga:
    """Creates an identity and its profile across two independent stores.
    
    The stores share no transaction, so a failed profile write is undone by
    deleting the identity. When that delete fails as well the result is a
    ``CompensationFailure``, reported to the reconciliation sink and kept
    distinct from ordinary signup errors.
    
    Steps run strictly in sequence; the profile write never starts before the
    identity exists, and compensation never starts before the profile write
    has failed. Cancelling the caller does not interrupt a run in flight: the
    saga finishes, compensation included, before the cancellation propagates.
    """
    
    def __init__(
        self,
        identity_gateway: IdentityGatewayProtocol,
        profile_store: ProfileStoreProtocol,
        reconciliation_sink: Optional[ReconciliationSinkProtocol] = None,
        default_role: ProfileRole = ProfileRole.CLIENT,
    ):
        self.identity_gateway = identity_gateway
        self.profile_store = profile_store
        self.reconciliation_sink = reconciliation_sink or LoggingReconciliationSink()
        self.default_role = default_role
    
    async def signup(self, request: SignupRequest) -> SignupResult:
        """Run the saga.
        
        Args:
            request: Email and password from the sign-up form
            
        Returns:
            ``SignupResult`` carrying the new identity, or one of
            ``IdentityCreationError``, ``ProfileCreationError`` and
            ``CompensationFailure``
        """
        run = asyncio.ensure_future(self._run(request))
        try:
            return await asyncio.shield(run)
        except asyncio.CancelledError:
            logger.warning("Signup cancelled in flight, finishing it before cancelling")
            await asyncio.shield(run)
            raise
    
    async def _run(self, request: SignupRequest) -> SignupResult:
        # Step 1: identity
        try:
            identity = await self.identity_gateway.create_identity(request.email, request.password)
        except UserAlreadyExistsError:
            logger.info("Signup rejected: email already registered")
            return SignupResult.failed(
                IdentityCreationError("An account with this email already exists", details={"reason": "duplicate"})
            )
        except Exception as e:
            logger.warning(f"Identity creation failed: {e!r}")
            return SignupResult.failed(
                IdentityCreationError("We could not create your account", details={"reason": type(e).__name__})
            )
        
        logger.info(f"Identity {identity.id} created, creating profile")
        
        # Step 2: profile
        try:
            await self.profile_store.create_profile(identity.id, identity.email, self.default_role)
        except Exception as profile_error:
            logger.error(f"Profile creation failed for identity {identity.id}: {profile_error!r}")
            return await self._compensate(identity, profile_error)
        
        logger.info(f"Signup complete for identity {identity.id}")
        return SignupResult.created(identity)
    
    async def _compensate(self, identity: Identity, profile_error: Exception) -> SignupResult:
        # Step 3: exactly one compensating delete
        try:
            await self.identity_gateway.delete_identity(identity.id)
        except Exception as compensation_error:
            failure = CompensationFailure(
                "Signup left an identity without a profile",
                identity_id=identity.id.value,
                email=identity.email,
                original_error=profile_error,
                compensation_error=compensation_error,
            )
            logger.critical(
                f"Compensation failed for identity {identity.id}: {compensation_error!r}"
            )
            await self._report(failure)
            return SignupResult.failed(failure)
        
        logger.info(f"Identity {identity.id} rolled back after profile failure")
        return SignupResult.failed(
            ProfileCreationError(
                "We could not finish setting up your account",
                identity_id=identity.id.value,
                cause=profile_error,
            )
        )
    
    async def _report(self, failure: CompensationFailure) -> None:
        try:
            await self.reconciliation_sink.report(failure)
        except Exception as e:
            # The failure is still returned to the caller; only the signal is lost
            logger.exception(f"Reconciliation sink failed for identity {failure.identity_id}: {e}")
