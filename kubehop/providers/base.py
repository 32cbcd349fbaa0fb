from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from kubehop.config.configset import ConfigurationSet


class Cluster(BaseModel):
    """
    A Kubernetes cluster found by a discovery provider.
    """

    id: str = Field(..., description="Provider specific unique id of the cluster.")
    name: str
    endpoint: Optional[str] = Field(None, description="The API server endpoint.")
    certificate_authority_data: Optional[str] = Field(
        None, description="Base64 encoded CA certificate of the API server."
    )


class Identity(BaseModel):
    """
    The identity of an authenticated user. Providers subclass this with the
    details their discovery counterparts need.
    """

    provider: str


class Plugin(ABC):
    name: str = ""
    usage_example: str = ""

    def __init__(self, interactive: bool = False) -> None:
        self.interactive = interactive

    @classmethod
    @abstractmethod
    def config_items(cls) -> ConfigurationSet:
        """
        Returns the configuration items the provider needs. The names of the
        items double as the command line flags of the `use` command.
        """


class IdentityProvider(Plugin):
    def validate(self, cs: ConfigurationSet) -> None:
        pass

    @abstractmethod
    def authenticate(self, cs: ConfigurationSet) -> Identity:
        pass


class DiscoveryProvider(Plugin):
    supported_identity_providers: List[str] = []

    def resolve(self, cs: ConfigurationSet, identity: Identity) -> None:
        """
        Hook for filling config items that need the authenticated identity.
        """

    @abstractmethod
    def discover(self, cs: ConfigurationSet, identity: Identity) -> Dict[str, Cluster]:
        pass

    @abstractmethod
    def get_cluster(
        self, cs: ConfigurationSet, identity: Identity, cluster_id: str
    ) -> Cluster:
        pass

    @abstractmethod
    def get_config(
        self, cluster: Cluster, identity: Identity, namespace: Optional[str] = None
    ) -> Tuple[Dict[str, Any], str]:
        """
        Builds the kubeconfig for a cluster.

        Returns:
            Tuple[Dict[str, Any], str]: The kubeconfig and the name of its context.
        """
