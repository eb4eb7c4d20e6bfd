"""
Service wiring and FastAPI dependencies for the geolocate package.

Shared services (cache backends, ipstack client, annotator) are built once in
the application lifespan and stored on ``app.state.geolocation``. Each request
gets its own GeoResolver with a fresh request-local cache layer that is
emptied when the request ends.
"""

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Annotated, Any, Callable, Iterator, Optional

from fastapi import Depends, Request

from infrastructure.cache import (
    CacheLayer,
    DynamoDBLocationStore,
    MultiLayerCache,
    PersistentCacheLayer,
    RedisObjectCache,
    RequestLRUCache,
    build_dynamodb_client,
    build_redis_client,
)
from infrastructure.clients.ipstack import IPStackClient
from infrastructure.logging import get_module_logger
from packages.geolocate.annotator import SubmissionAnnotator
from packages.geolocate.entries import DynamoDBEntryStore
from packages.geolocate.pipeline import EntryRepository, SubmissionPipeline
from packages.geolocate.schemas import GeolocationConfig, LocationRecord
from packages.geolocate.service import GeoResolver

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = get_module_logger()


def build_geolocation_config(settings: "Settings") -> GeolocationConfig:
    """Collect the geolocation settings into one typed config."""
    return GeolocationConfig(
        access_key=settings.ipstack.IPSTACK_ACCESS_KEY or None,
        allowed_countries=frozenset(settings.country_validation.ALLOWED_COUNTRIES),
        validation_enabled=settings.country_validation.COUNTRY_VALIDATION_ENABLED,
        rejection_message=settings.country_validation.COUNTRY_VALIDATION_MESSAGE,
        request_cache_max_size=settings.geolocation_cache.GEOLOCATION_REQUEST_CACHE_MAX_SIZE,
        success_ttl=settings.geolocation_cache.GEOLOCATION_SUCCESS_TTL_SECONDS,
        error_ttl=settings.geolocation_cache.GEOLOCATION_ERROR_TTL_SECONDS,
    )


@dataclass
class GeolocationServices:
    """Process-wide collaborators shared by every request."""

    config: GeolocationConfig
    client: IPStackClient
    object_cache: CacheLayer[LocationRecord]
    persistent_store: PersistentCacheLayer[LocationRecord]
    annotator: SubmissionAnnotator
    entry_store: EntryRepository
    resources: list[Any] = field(default_factory=list)
    clock: Callable[[], float] = time.time

    def build_cache(self) -> MultiLayerCache[LocationRecord]:
        """Compose the shared layers with a new request-local layer."""
        return MultiLayerCache(
            request_cache=RequestLRUCache(
                max_size=self.config.request_cache_max_size, clock=self.clock
            ),
            object_cache=self.object_cache,
            persistent_store=self.persistent_store,
            success_ttl=self.config.success_ttl,
            error_ttl=self.config.error_ttl,
            clock=self.clock,
        )

    def build_resolver(self, secure: bool = True) -> GeoResolver:
        return GeoResolver(
            cache=self.build_cache(),
            client=self.client,
            config=self.config,
            secure=secure,
        )

    def close(self) -> None:
        """Release network resources at shutdown."""
        self.client.close()
        for resource in self.resources:
            close = getattr(resource, "close", None)
            if close is not None:
                close()
        self.annotator.clear()


def build_geolocation_services(settings: "Settings") -> GeolocationServices:
    """Create the shared services from settings."""
    redis_client = build_redis_client(settings)
    dynamodb_client = build_dynamodb_client(settings)
    entry_store = DynamoDBEntryStore(
        dynamodb_client,
        table_name=settings.geolocation_cache.GEOLOCATION_ENTRIES_TABLE,
    )

    services = GeolocationServices(
        config=build_geolocation_config(settings),
        client=IPStackClient(settings),
        object_cache=RedisObjectCache(
            redis_client,
            record_type=LocationRecord,
            namespace=settings.geolocation_cache.GEOLOCATION_CACHE_NAMESPACE,
        ),
        persistent_store=DynamoDBLocationStore(
            dynamodb_client,
            record_type=LocationRecord,
            table_name=settings.geolocation_cache.GEOLOCATION_CACHE_TABLE,
        ),
        annotator=SubmissionAnnotator(note_writer=entry_store),
        entry_store=entry_store,
        resources=[redis_client, dynamodb_client],
    )
    logger.info(
        "geolocation_services_initialized",
        has_access_key=services.config.has_access_key,
        validation_enabled=services.config.validation_enabled,
        request_cache_max_size=services.config.request_cache_max_size,
    )
    return services


def get_geolocation_services(request: Request) -> GeolocationServices:
    """Shared services built by the application lifespan."""
    services: Optional[GeolocationServices] = getattr(
        request.app.state, "geolocation", None
    )
    if services is None:
        raise RuntimeError("Geolocation services are not initialized")
    return services


GeolocationServicesDep = Annotated[
    GeolocationServices, Depends(get_geolocation_services)
]


def get_geo_resolver(
    request: Request, services: GeolocationServicesDep
) -> Iterator[GeoResolver]:
    """Per-request resolver; its request-local cache is emptied afterwards."""
    resolver = services.build_resolver(secure=request.url.scheme == "https")
    try:
        yield resolver
    finally:
        resolver.release()


GeoResolverDep = Annotated[GeoResolver, Depends(get_geo_resolver)]


def get_submission_pipeline(
    resolver: GeoResolverDep, services: GeolocationServicesDep
) -> SubmissionPipeline:
    return SubmissionPipeline(
        resolver=resolver,
        annotator=services.annotator,
        entry_store=services.entry_store,
    )


SubmissionPipelineDep = Annotated[
    SubmissionPipeline, Depends(get_submission_pipeline)
]
