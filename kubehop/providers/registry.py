from __future__ import annotations

from typing import Dict, List, Optional, Type

from kubehop.errors import DuplicatePluginError, PluginNotFoundError
from kubehop.providers.aws import AwsIamIdentityProvider, EksDiscoveryProvider
from kubehop.providers.base import DiscoveryProvider, IdentityProvider


class ProviderRegistry:
    """
    Lookup of discovery and identity providers by name.

    The registry is built once at start up from an explicit list of provider
    classes and handed to the command handlers.
    """

    def __init__(self) -> None:
        self._discovery: Dict[str, Type[DiscoveryProvider]] = {}
        self._identity: Dict[str, Type[IdentityProvider]] = {}

    def register_discovery(self, provider_cls: Type[DiscoveryProvider]) -> None:
        if provider_cls.name in self._discovery:
            raise DuplicatePluginError("discovery", provider_cls.name)
        self._discovery[provider_cls.name] = provider_cls

    def register_identity(self, provider_cls: Type[IdentityProvider]) -> None:
        if provider_cls.name in self._identity:
            raise DuplicatePluginError("identity", provider_cls.name)
        self._identity[provider_cls.name] = provider_cls

    def get_discovery_class(self, name: str) -> Type[DiscoveryProvider]:
        if name not in self._discovery:
            raise PluginNotFoundError("discovery", name)
        return self._discovery[name]

    def get_identity_class(self, name: str) -> Type[IdentityProvider]:
        if name not in self._identity:
            raise PluginNotFoundError("identity", name)
        return self._identity[name]

    def get_discovery(self, name: str, interactive: bool = False) -> DiscoveryProvider:
        return self.get_discovery_class(name)(interactive=interactive)

    def get_identity(self, name: str, interactive: bool = False) -> IdentityProvider:
        return self.get_identity_class(name)(interactive=interactive)

    def discovery_names(self) -> List[str]:
        return sorted(self._discovery)

    def identity_names(self) -> List[str]:
        return sorted(self._identity)

    def is_identity_supported(self, discovery: str, identity: str) -> bool:
        supported = self.get_discovery_class(discovery).supported_identity_providers
        return identity in supported


def build_registry(
    discovery: Optional[List[Type[DiscoveryProvider]]] = None,
    identity: Optional[List[Type[IdentityProvider]]] = None,
) -> ProviderRegistry:
    """
    Builds a registry from lists of provider classes. Without arguments the
    providers shipped with kubehop are registered.
    """
    if discovery is None:
        discovery = [EksDiscoveryProvider]
    if identity is None:
        identity = [AwsIamIdentityProvider]

    registry = ProviderRegistry()
    for discovery_cls in discovery:
        registry.register_discovery(discovery_cls)
    for identity_cls in identity:
        registry.register_identity(identity_cls)

    return registry
