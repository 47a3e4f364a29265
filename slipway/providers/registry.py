"""Provider selection.

Maps a provider configuration object to its ProviderService. Provider
modules are imported lazily so only the selected one is loaded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

from loguru import logger

if TYPE_CHECKING:
    from slipway.providers.hbase.config import HBase
    from slipway.providers.provider import ProviderService

log = logger.bind(component="registry")

ProviderConfig: TypeAlias = "HBase"


def create_provider(config: ProviderConfig) -> ProviderService:
    """Create the ProviderService for a configuration object.

    Raises:
        ValueError: If no provider is registered for the configuration type.
    """
    from slipway.providers.hbase.config import HBase

    log.debug("Creating provider for config={config_type}", config_type=type(config).__name__)

    match config:
        case HBase():
            from slipway.providers.hbase.provider import HBaseProvider

            return HBaseProvider(config)
        case _:
            raise ValueError(
                f"No provider registered for {type(config).__name__}. "
                f"Available providers: HBase"
            )
