"""Document store for team installation and user records.

This package provides the container abstraction, the one-time store
initializer and the bot data provider built on top of them.
"""

from icebreaker.storage.containers import (
    CosmosDocumentContainer,
    DocumentContainer,
    InMemoryDocumentContainer,
)
from icebreaker.storage.data_provider import (
    BotDataProvider,
    IcebreakerBotDataProvider,
    create_data_provider,
)
from icebreaker.storage.exceptions import (
    RecordNotFoundError,
    StoreError,
    StoreInitializationError,
)
from icebreaker.storage.initializer import (
    CosmosStoreInitializer,
    InMemoryStoreInitializer,
    StoreContainers,
    StoreInitializer,
)

__all__ = [
    "BotDataProvider",
    "CosmosDocumentContainer",
    "CosmosStoreInitializer",
    "DocumentContainer",
    "IcebreakerBotDataProvider",
    "InMemoryDocumentContainer",
    "InMemoryStoreInitializer",
    "RecordNotFoundError",
    "StoreContainers",
    "StoreError",
    "StoreInitializationError",
    "StoreInitializer",
    "create_data_provider",
]
