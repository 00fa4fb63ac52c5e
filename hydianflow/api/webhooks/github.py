"""
GitHub Webhook Handler

Receives repository deliveries and keeps task statuses in sync with branch
activity. Order of checks for every delivery:

1. required headers (X-GitHub-Event, X-GitHub-Delivery, X-Hub-Signature-256)
2. body read with a size cap
3. HMAC-SHA256 signature over the raw body
4. delivery log insert (duplicate deliveries stop here)
5. payload decoding for push / pull_request, everything else is ignored
6. task transitions
"""
from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import ClientDisconnect

from hydianflow.api.dependencies.webhook_auth import get_signature_verifier
from hydianflow.core.config import settings
from hydianflow.core.exceptions import AuthenticationError, ErrorCode, ValidationException
from hydianflow.core.logging import bind_delivery_id, get_logger
from hydianflow.db.database import get_db
from hydianflow.domain.github.events import PushEvent, parse_event
from hydianflow.domain.github.signature import SignatureVerifier, is_well_formed
from hydianflow.domain.services.delivery_log_service import DeliveryLogService
from hydianflow.domain.services.github_sync_service import GitHubSyncService

logger = get_logger(__name__)

router = APIRouter()


async def _read_body(request: Request, limit: int) -> bytes:
    """Read the whole body, failing as soon as it grows past ``limit`` bytes."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > limit:
        raise ValidationException("body too large", error_code=ErrorCode.BAD_BODY)

    body = bytearray()
    try:
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > limit:
                raise ValidationException("body too large", error_code=ErrorCode.BAD_BODY)
    except ClientDisconnect as e:
        raise ValidationException("could not read body", error_code=ErrorCode.BAD_BODY) from e
    return bytes(body)


@router.post(
    "/github",
    summary="GitHub Webhook",
    description="Receives push and pull_request deliveries and moves linked tasks.",
    responses={
        200: {"description": "Processed, ignored, or duplicate delivery"},
        400: {"description": "Missing headers, bad body, or undecodable payload"},
        401: {"description": "Signature mismatch"},
        500: {"description": "Database failure"},
    },
    tags=["Webhooks"],
)
async def github_webhook(
    request: Request,
    x_github_event: str | None = Header(None),
    x_github_delivery: str | None = Header(None),
    x_hub_signature_256: str | None = Header(None),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
    db: AsyncSession = Depends(get_db),
) -> dict:
    event_type = (x_github_event or "").strip()
    delivery_id = (x_github_delivery or "").strip()
    if not event_type or not delivery_id:
        raise ValidationException("missing github headers", error_code=ErrorCode.BAD_REQUEST)
    bind_delivery_id(delivery_id)

    if not is_well_formed(x_hub_signature_256):
        raise ValidationException(
            "missing or malformed X-Hub-Signature-256",
            error_code=ErrorCode.BAD_SIGNATURE_HEADER,
        )

    body = await _read_body(request, settings.WEBHOOK_MAX_BODY_BYTES)

    if not verifier.verify(body, x_hub_signature_256):
        logger.warning(
            "GitHub webhook: signature mismatch",
            extra_data={"event": event_type},
        )
        raise AuthenticationError()

    if not await DeliveryLogService(db).record_delivery(delivery_id, event_type, body):
        return {"data": {"duplicate": True}}

    event = parse_event(event_type, body)
    if event is None:
        logger.info(
            "GitHub webhook: ignored event",
            extra_data={"event": event_type},
        )
        return {"data": {"ignored_event": event_type}}

    sync = GitHubSyncService(db)
    if isinstance(event, PushEvent):
        updated = await sync.handle_push(event)
    else:
        updated = await sync.handle_pull_request(event)

    logger.info(
        "GitHub webhook processed",
        extra_data={"event": event_type, "updated": updated},
    )
    return {"data": {"updated": updated, "event": event_type}}
