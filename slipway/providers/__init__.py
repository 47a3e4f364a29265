from slipway.providers.hbase import HBase
from slipway.providers.provider import ProviderConfig, ProviderService
from slipway.providers.registry import create_provider

__all__ = ["HBase", "ProviderConfig", "ProviderService", "create_provider"]
