# Standard library imports
from typing import Optional

# Local application imports
from .base_container import BaseContainer
from .providers import (
    DatabaseProvider,
    FaceProvider,
    GuestProvider,
    MessagingProvider,
    PhotoProvider,
    RepositoryProvider,
    ServicesProvider,
)


class DIContainer(BaseContainer):
    """
    Main dependency injection container.
    Composes all providers in the correct order.
    
    Registration order is important:
    1. Database connections (DatabaseProvider)
    2. Stores, storage and detection (RepositoryProvider) - depends on database
    3. Matching, propagation, notifications, messaging (ServicesProvider)
    4. Use cases (Photo/Face/Guest/Messaging providers) - depend on all of the above
    """
    
    def __init__(self) -> None:
        super().__init__()
        self.setup()
    
    def setup(self) -> None:
        """
        Setup dependency registrations by composing all providers.
        Order matters: database → repositories → services → use cases
        """
        DatabaseProvider.register(self)
        RepositoryProvider.register(self)
        ServicesProvider.register(self)
        PhotoProvider.register(self)
        FaceProvider.register(self)
        GuestProvider.register(self)
        MessagingProvider.register(self)


# Global container instance (singleton pattern)
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """
    Get the global DI container instance (singleton pattern)
    
    Returns:
        DIContainer instance with all dependencies registered
    """
    global _container
    if _container is None:
        _container = DIContainer()
    return _container
