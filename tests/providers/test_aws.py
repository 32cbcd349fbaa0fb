from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws

from kubehop.config.configset import ConfigurationSet
from kubehop.errors import ClusterNotFoundError, KubehopError
from kubehop.providers.aws import (
    AwsIamIdentityProvider,
    AwsIdentity,
    EksDiscoveryProvider,
    cluster_name_from_arn,
    resolve_region,
    shared_config,
)
from kubehop.providers.base import Cluster, Identity

REGION = "eu-west-1"


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("AWS_DEFAULT_PROFILE", raising=False)


def _create_cluster(name: str) -> str:
    client = boto3.client("eks", region_name=REGION)
    output = client.create_cluster(
        name=name,
        roleArn="arn:aws:iam::123456789012:role/eks",
        resourcesVpcConfig={"subnetIds": ["subnet-12345678"]},
    )
    return output["cluster"]["arn"]


def _use_config() -> ConfigurationSet:
    cs = ConfigurationSet()
    cs.merge(AwsIamIdentityProvider.config_items())
    cs.merge(EksDiscoveryProvider.config_items())
    cs.set_value("region", REGION)
    cs.set_value("partition", "aws")
    return cs


def _identity() -> AwsIdentity:
    return AwsIdentity(
        provider="aws-iam",
        access_key="testing",
        secret_key="testing",
        session_token="testing",
        region=REGION,
    )


def test_shared_config() -> None:
    cs = shared_config()

    partition = cs.get("partition")
    region = cs.get("region")
    assert partition is not None and partition.required
    assert partition.default_value == "aws"
    assert region is not None and region.required
    assert cs.get_resolver("region") is resolve_region


def test_identity_config_items() -> None:
    cs = AwsIamIdentityProvider.config_items()

    for name in ("access-key", "secret-key", "session-token"):
        item = cs.get(name)
        assert item is not None and item.sensitive

    profile = cs.get("profile")
    assert profile is not None and not profile.sensitive


def test_resolve_region() -> None:
    cs = shared_config()

    with patch("kubehop.providers.aws.choose", return_value="eu-west-1") as choose:
        resolve_region("region", cs)

    assert cs.value_string("region") == "eu-west-1"
    options = choose.call_args.args[1]
    assert ("eu-west-1", "eu-west-1") in options


def test_cluster_name_from_arn() -> None:
    arn = "arn:aws:eks:us-west-2:000000000000:cluster/dev"
    assert cluster_name_from_arn(arn) == "dev"

    with pytest.raises(ClusterNotFoundError):
        cluster_name_from_arn("dev")

    with pytest.raises(ClusterNotFoundError):
        cluster_name_from_arn("arn:aws:eks:us-west-2:000000000000:nodegroup/dev/ng")


def test_validate() -> None:
    provider = AwsIamIdentityProvider()

    cs = _use_config()
    cs.set_value("profile", "dev")
    cs.set_value("access-key", "AKIA")
    with pytest.raises(KubehopError):
        provider.validate(cs)

    cs = _use_config()
    cs.set_value("access-key", "AKIA")
    with pytest.raises(KubehopError):
        provider.validate(cs)

    cs = _use_config()
    cs.set_value("access-key", "AKIA")
    cs.set_value("secret-key", "secret")
    provider.validate(cs)


@mock_aws
def test_authenticate_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    # mock_aws installs its own credentials when it starts
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")

    identity = AwsIamIdentityProvider().authenticate(_use_config())

    assert identity.provider == "aws-iam"
    assert identity.access_key == "testing"
    assert identity.secret_key == "testing"
    assert identity.region == REGION
    assert identity.profile is None
    assert "testing" not in repr(identity)


@mock_aws
def test_authenticate_with_keys() -> None:
    cs = _use_config()
    cs.set_value("access-key", "AKIAEXAMPLE")
    cs.set_value("secret-key", "example-secret")

    identity = AwsIamIdentityProvider().authenticate(cs)

    assert identity.access_key == "AKIAEXAMPLE"
    assert identity.secret_key == "example-secret"


def test_authenticate_unknown_profile(
    tmp_path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "config"))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "credentials"))
    cs = _use_config()
    cs.set_value("profile", "missing")

    with pytest.raises(KubehopError):
        AwsIamIdentityProvider().authenticate(cs)


@mock_aws
def test_discover() -> None:
    dev_arn = _create_cluster("dev")
    prod_arn = _create_cluster("prod")

    clusters = EksDiscoveryProvider().discover(_use_config(), _identity())

    assert set(clusters) == {dev_arn, prod_arn}
    dev = clusters[dev_arn]
    assert dev.name == "dev"
    assert dev.endpoint


@mock_aws
def test_discover_no_clusters() -> None:
    assert EksDiscoveryProvider().discover(_use_config(), _identity()) == {}


@mock_aws
def test_get_cluster() -> None:
    arn = _create_cluster("dev")
    provider = EksDiscoveryProvider()

    cluster = provider.get_cluster(_use_config(), _identity(), arn)
    assert cluster.id == arn
    assert cluster.name == "dev"

    missing = arn.replace("cluster/dev", "cluster/missing")
    with pytest.raises(ClusterNotFoundError):
        provider.get_cluster(_use_config(), _identity(), missing)


def test_discover_requires_aws_identity() -> None:
    with pytest.raises(KubehopError):
        EksDiscoveryProvider().discover(_use_config(), Identity(provider="other"))


def test_get_config() -> None:
    provider = EksDiscoveryProvider()
    cluster = Cluster(
        id="arn:aws:eks:eu-west-1:000000000000:cluster/dev",
        name="dev",
        endpoint="https://dev.eks.amazonaws.com",
        certificate_authority_data="Y2E=",
    )
    identity = AwsIdentity(provider="aws-iam", profile="work", region=REGION)

    kubeconfig, context_name = provider.get_config(cluster, identity, "apps")

    assert context_name == "work@eks-dev"
    assert kubeconfig["current-context"] == "work@eks-dev"
    assert kubeconfig["clusters"][0] == {
        "name": "eks-dev",
        "cluster": {
            "server": "https://dev.eks.amazonaws.com",
            "certificate-authority-data": "Y2E=",
        },
    }
    assert kubeconfig["contexts"][0]["context"] == {
        "cluster": "eks-dev",
        "user": "work@eks-dev",
        "namespace": "apps",
    }

    exec_config = kubeconfig["users"][0]["user"]["exec"]
    assert exec_config["command"] == "aws"
    assert exec_config["args"] == [
        "eks",
        "get-token",
        "--cluster-name",
        "dev",
        "--region",
        REGION,
    ]
    assert exec_config["env"] == [{"name": "AWS_PROFILE", "value": "work"}]


@mock_aws
def test_get_config_with_role() -> None:
    arn = _create_cluster("dev")
    cs = _use_config()
    cs.set_value("role-arn", "arn:aws:iam::123456789012:role/admin")
    provider = EksDiscoveryProvider()

    cluster = provider.get_cluster(cs, _identity(), arn)
    kubeconfig, context_name = provider.get_config(cluster, _identity())

    assert context_name == "aws@eks-dev"
    exec_config = kubeconfig["users"][0]["user"]["exec"]
    assert exec_config["args"][-2:] == [
        "--role-arn",
        "arn:aws:iam::123456789012:role/admin",
    ]
    assert "env" not in exec_config
    assert "namespace" not in kubeconfig["contexts"][0]["context"]
