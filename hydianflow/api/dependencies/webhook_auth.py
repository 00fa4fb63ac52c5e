"""
GitHub webhook signature dependency.

The verifier is built from configuration per request, so tests can swap the
secret through ``settings`` or override the dependency.

Usage:
    @router.post("/github")
    async def github_webhook(
        ...,
        verifier: SignatureVerifier = Depends(get_signature_verifier),
    ):
        ...
"""
from hydianflow.core.config import settings
from hydianflow.core.logging import get_logger
from hydianflow.domain.github.signature import SignatureVerifier

logger = get_logger(__name__)


def get_signature_verifier() -> SignatureVerifier:
    verifier = SignatureVerifier(settings.GITHUB_WEBHOOK_SECRET)
    if not verifier.configured:
        logger.error("GITHUB_WEBHOOK_SECRET is not set, rejecting delivery")
    return verifier
