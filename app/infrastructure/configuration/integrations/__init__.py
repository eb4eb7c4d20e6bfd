"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.aws import AwsSettings
from infrastructure.configuration.integrations.elasticache import ElastiCacheSettings
from infrastructure.configuration.integrations.ipstack import IPStackSettings

__all__ = [
    "AwsSettings",
    "ElastiCacheSettings",
    "IPStackSettings",
]
