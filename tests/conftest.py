from typing import Any, Dict, Optional, Tuple

import pytest

from kubehop.config.configset import ConfigurationSet
from kubehop.providers.base import (
    Cluster,
    DiscoveryProvider,
    Identity,
    IdentityProvider,
)
from kubehop.providers.registry import ProviderRegistry, build_registry


class FakeIdentityProvider(IdentityProvider):
    name = "fake-idp"

    @classmethod
    def config_items(cls) -> ConfigurationSet:
        cs = ConfigurationSet()
        cs.add_string("username", "", "Username to log in with")
        cs.add_string("password", "", "Password to log in with")
        cs.set_required("username")
        cs.set_sensitive("password")
        return cs

    def authenticate(self, cs: ConfigurationSet) -> Identity:
        return Identity(provider=self.name)


class FakeDiscoveryProvider(DiscoveryProvider):
    name = "fake"
    supported_identity_providers = ["fake-idp"]
    usage_example = """
  # Connect to a fake cluster
  kubehop use fake --username bob
"""

    clusters: Dict[str, Cluster] = {
        "cluster-1": Cluster(id="cluster-1", name="one", endpoint="https://one"),
    }

    @classmethod
    def config_items(cls) -> ConfigurationSet:
        cs = ConfigurationSet()
        cs.add_string("region", "", "Region of the clusters")
        cs.add_int("port", 443, "API server port")
        return cs

    def discover(self, cs: ConfigurationSet, identity: Identity) -> Dict[str, Cluster]:
        return dict(self.clusters)

    def get_cluster(
        self, cs: ConfigurationSet, identity: Identity, cluster_id: str
    ) -> Cluster:
        return self.clusters[cluster_id]

    def get_config(
        self, cluster: Cluster, identity: Identity, namespace: Optional[str] = None
    ) -> Tuple[Dict[str, Any], str]:
        name = f"fake-{cluster.name}"
        context: Dict[str, Any] = {"cluster": name, "user": name}
        if namespace:
            context["namespace"] = namespace
        kubeconfig = {
            "apiVersion": "v1",
            "kind": "Config",
            "clusters": [{"name": name, "cluster": {"server": cluster.endpoint}}],
            "users": [{"name": name, "user": {"token": "secret"}}],
            "contexts": [{"name": name, "context": context}],
            "current-context": name,
        }
        return kubeconfig, name


@pytest.fixture(autouse=True)
def kubehop_home(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> Any:
    home = tmp_path / "kubehop-home"
    monkeypatch.setenv("KUBEHOP_HOME", str(home))
    monkeypatch.setenv("KUBECONFIG", str(tmp_path / "kube" / "config"))
    return home


@pytest.fixture
def fake_registry() -> ProviderRegistry:
    return build_registry([FakeDiscoveryProvider], [FakeIdentityProvider])

