"""FastAPI dependency wiring for stores and pipelines."""

from __future__ import annotations

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from brick_deals.services.catalog.rebrickable_client import CatalogSource, get_catalog_source
from brick_deals.services.notifications.push_gateway import PushGateway, get_push_gateway
from brick_deals.services.pipeline import DealPipeline, create_pipeline
from brick_deals.services.storage.catalog_store import CatalogStore
from brick_deals.services.storage.deal_store import DealStore
from brick_deals.services.storage.price_store import PriceStore
from brick_deals.services.storage.redis_client import get_redis_client
from brick_deals.services.storage.subscriber_registry import SubscriberRegistry

RedisDependency = Annotated[redis.Redis, Depends(get_redis_client)]
GatewayDependency = Annotated[PushGateway, Depends(get_push_gateway)]
CatalogSourceDependency = Annotated[CatalogSource, Depends(get_catalog_source)]


def get_catalog_store(client: RedisDependency) -> CatalogStore:
    return CatalogStore(client)


def get_deal_store(client: RedisDependency) -> DealStore:
    return DealStore(client)


def get_price_store(client: RedisDependency) -> PriceStore:
    return PriceStore(client)


def get_subscriber_registry(client: RedisDependency) -> SubscriberRegistry:
    return SubscriberRegistry(client)


def get_pipeline(
    client: RedisDependency,
    catalog_source: CatalogSourceDependency,
    gateway: GatewayDependency,
) -> DealPipeline:
    return create_pipeline(client, catalog_source=catalog_source, gateway=gateway)


CatalogStoreDependency = Annotated[CatalogStore, Depends(get_catalog_store)]
DealStoreDependency = Annotated[DealStore, Depends(get_deal_store)]
PriceStoreDependency = Annotated[PriceStore, Depends(get_price_store)]
RegistryDependency = Annotated[SubscriberRegistry, Depends(get_subscriber_registry)]
PipelineDependency = Annotated[DealPipeline, Depends(get_pipeline)]
