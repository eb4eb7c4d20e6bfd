"""FastAPI routes for geolocate package."""

import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.dependencies.rate_limits import (
    GEOLOCATE_LIMIT,
    SUBMISSION_LIMIT,
    get_client_ip,
    get_limiter,
)
from infrastructure.auth import get_relay_token, validate_admin_token
from infrastructure.logging import get_module_logger
from packages.geolocate.dependencies import (
    GeolocationServicesDep,
    GeoResolverDep,
    SubmissionPipelineDep,
)
from packages.geolocate.entries import EntryStoreError
from packages.geolocate.schemas import (
    CacheClearResponse,
    CacheStatsResponse,
    EntryNotesResponse,
    GeolocateRequest,
    GeolocateResponse,
    LookupErrorKind,
    Submission,
    SubmissionResult,
)

logger = get_module_logger()
limiter = get_limiter()
router = APIRouter(prefix="/geolocate", tags=["geolocate"])

ERROR_STATUS_CODES = {
    LookupErrorKind.EMPTY_INPUT: 400,
    LookupErrorKind.INVALID_FORMAT: 400,
    LookupErrorKind.CONFIG_MISSING: 503,
    LookupErrorKind.TRANSPORT_ERROR: 502,
    LookupErrorKind.PROVIDER_ERROR: 502,
    LookupErrorKind.DATA_ERROR: 502,
}


@router.get(
    "",
    response_model=GeolocateResponse,
    summary="Geolocate IP Address",
    description="Resolve an IP address to its location through the cache layers and ipstack",
)
@limiter.limit(GEOLOCATE_LIMIT)
def get_geolocate(
    request: Request,  # pylint: disable=unused-argument
    resolver: GeoResolverDep,
    geolocate_request: GeolocateRequest = Query(
        ..., description="Geolocate request payload"
    ),
) -> GeolocateResponse:
    """Geolocate an IP address via HTTP GET.

    Raises:
        HTTPException: 400 for invalid input, 503 when the service is not
            configured, 502 for provider failures
    """
    log = logger.bind(
        ip_address=geolocate_request.ip_address, endpoint="/geolocate"
    )
    log.info("geolocate_request")

    record = resolver.resolve(geolocate_request.ip_address)

    if not record.is_error:
        log.info("geolocate_success", country=record.country_name)
        return GeolocateResponse.from_record(record)

    status_code = ERROR_STATUS_CODES.get(record.error_kind, 502)
    log.warning(
        "geolocate_error",
        error=record.error_message,
        error_kind=record.error_kind.value if record.error_kind else None,
        status_code=status_code,
    )
    raise HTTPException(status_code=status_code, detail=record.error_message)


def _submitter_ip(
    request: Request, submission: Submission, relay: Optional[Dict[str, Any]]
) -> str:
    """Address the country gate and population run against.

    Only a relay (a trusted form frontend holding a relay token) may name
    the submitter; everyone else is attributed to their own address.
    """
    claimed = submission.ip_address.strip()
    if relay is not None and claimed:
        return claimed

    caller_ip = get_client_ip(request)
    if claimed and claimed != caller_ip:
        logger.warning(
            "submission_ip_ignored", claimed_ip=claimed, caller_ip=caller_ip
        )
    return caller_ip


@router.post(
    "/submissions",
    response_model=SubmissionResult,
    summary="Process Form Submission",
    description="Validate the submitter country, populate location fields and store the entry",
)
@limiter.limit(SUBMISSION_LIMIT)
def post_submission(
    request: Request,
    submission: Submission,
    pipeline: SubmissionPipelineDep,
    relay: Optional[Dict[str, Any]] = Depends(get_relay_token),
) -> SubmissionResult:
    """Run a submission through the pipeline.

    The submission id is always generated here; client-sent ids are ignored.

    Raises:
        HTTPException: 422 when the country gate rejects the submission,
            503 when the entry cannot be stored
    """
    submission = submission.model_copy(
        update={
            "submission_id": str(uuid.uuid4()),
            "ip_address": _submitter_ip(request, submission, relay),
        }
    )
    try:
        result = pipeline.process(submission)
    except EntryStoreError as e:
        raise HTTPException(status_code=503, detail="Entry storage unavailable") from e
    if not result.accepted:
        raise HTTPException(status_code=422, detail=result.message)
    return result


@router.get(
    "/entries/{entry_id}/notes",
    response_model=EntryNotesResponse,
    summary="Entry Notes",
)
def get_entry_notes(
    entry_id: str,
    services: GeolocationServicesDep,
    _admin: Dict[str, Any] = Depends(validate_admin_token),
) -> EntryNotesResponse:
    try:
        notes = services.entry_store.notes_for(entry_id)
    except EntryStoreError as e:
        raise HTTPException(status_code=503, detail="Entry storage unavailable") from e
    if notes is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return EntryNotesResponse(entry_id=entry_id, notes=notes)


@router.get(
    "/cache/stats",
    response_model=CacheStatsResponse,
    summary="Geolocation Cache Statistics",
)
def get_cache_stats(
    resolver: GeoResolverDep,
    _admin: Dict[str, Any] = Depends(validate_admin_token),
) -> CacheStatsResponse:
    return CacheStatsResponse(**resolver.cache.get_stats())


@router.post(
    "/cache/clear",
    response_model=CacheClearResponse,
    summary="Clear Geolocation Cache",
)
def post_cache_clear(
    resolver: GeoResolverDep,
    admin: Dict[str, Any] = Depends(validate_admin_token),
) -> CacheClearResponse:
    counts = resolver.cache.purge()
    logger.info(
        "geolocation_cache_cleared_by_admin",
        subject=admin.get("sub"),
        persistent_cleared=counts.persistent,
        object_cache_cleared=counts.object_cache,
        memory_cache_cleared=counts.memory,
    )
    return CacheClearResponse(
        persistent_cleared=counts.persistent,
        object_cache_cleared=counts.object_cache,
        memory_cache_cleared=counts.memory,
    )
