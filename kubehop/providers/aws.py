from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import ClientError, ProfileNotFound
from pydantic import BaseModel, Field

from kubehop.config.binder import unmarshal
from kubehop.config.configset import ConfigurationSet
from kubehop.errors import ClusterNotFoundError, KubehopError
from kubehop.logger import logger
from kubehop.prompt import choose
from kubehop.providers.base import (
    Cluster,
    DiscoveryProvider,
    Identity,
    IdentityProvider,
)

PARTITION_CONFIG_ITEM = "partition"
REGION_CONFIG_ITEM = "region"
PROFILE_CONFIG_ITEM = "profile"
ACCESS_KEY_CONFIG_ITEM = "access-key"
SECRET_KEY_CONFIG_ITEM = "secret-key"
SESSION_TOKEN_CONFIG_ITEM = "session-token"
ROLE_ARN_CONFIG_ITEM = "role-arn"

EXEC_API_VERSION = "client.authentication.k8s.io/v1beta1"


class AwsIdentity(Identity):
    profile: Optional[str] = None
    access_key: str = Field("", repr=False)
    secret_key: str = Field("", repr=False)
    session_token: Optional[str] = Field(None, repr=False)
    region: Optional[str] = None


class AwsIamConfig(BaseModel):
    profile: Optional[str] = Field(None, alias=PROFILE_CONFIG_ITEM)
    access_key: Optional[str] = Field(None, alias=ACCESS_KEY_CONFIG_ITEM)
    secret_key: Optional[str] = Field(None, alias=SECRET_KEY_CONFIG_ITEM)
    session_token: Optional[str] = Field(None, alias=SESSION_TOKEN_CONFIG_ITEM)
    region: Optional[str] = Field(None, alias=REGION_CONFIG_ITEM)
    partition: str = Field("aws", alias=PARTITION_CONFIG_ITEM)


class EksConfig(BaseModel):
    region: Optional[str] = Field(None, alias=REGION_CONFIG_ITEM)
    partition: str = Field("aws", alias=PARTITION_CONFIG_ITEM)
    role_arn: Optional[str] = Field(None, alias=ROLE_ARN_CONFIG_ITEM)


def resolve_region(name: str, cs: ConfigurationSet) -> None:
    partition = cs.value_string(PARTITION_CONFIG_ITEM) or "aws"
    regions = boto3.session.Session().get_available_regions(
        "eks", partition_name=partition
    )
    cs.set_value(name, choose("Select an AWS region", [(r, r) for r in regions]))


def shared_config() -> ConfigurationSet:
    """
    Config items shared by the AWS identity and discovery providers.
    """
    cs = ConfigurationSet()
    cs.add_string(PARTITION_CONFIG_ITEM, "aws", "AWS partition to use")
    cs.add_string(REGION_CONFIG_ITEM, "", "AWS region to connect to")
    cs.set_required(PARTITION_CONFIG_ITEM)
    cs.set_required(REGION_CONFIG_ITEM)
    cs.set_resolver(REGION_CONFIG_ITEM, resolve_region)
    return cs


def cluster_name_from_arn(cluster_id: str) -> str:
    """
    Extracts the cluster name from an EKS cluster ARN.

    Example:
        >>> cluster_name_from_arn("arn:aws:eks:us-west-2:000000000000:cluster/dev")
        'dev'
    """
    parts = cluster_id.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn":
        raise ClusterNotFoundError(cluster_id)

    resource = parts[5].split("/")
    if len(resource) != 2 or resource[0] != "cluster":
        raise ClusterNotFoundError(cluster_id)

    return resource[1]


class AwsIamIdentityProvider(IdentityProvider):
    name = "aws-iam"

    @classmethod
    def config_items(cls) -> ConfigurationSet:
        cs = shared_config()
        cs.add_string(PROFILE_CONFIG_ITEM, "", "AWS profile to use")
        cs.add_string(ACCESS_KEY_CONFIG_ITEM, "", "AWS access key to use")
        cs.add_string(SECRET_KEY_CONFIG_ITEM, "", "AWS secret key to use")
        cs.add_string(SESSION_TOKEN_CONFIG_ITEM, "", "AWS session token to use")
        cs.set_sensitive(ACCESS_KEY_CONFIG_ITEM)
        cs.set_sensitive(SECRET_KEY_CONFIG_ITEM)
        cs.set_sensitive(SESSION_TOKEN_CONFIG_ITEM)
        return cs

    def validate(self, cs: ConfigurationSet) -> None:
        has_profile = cs.exists_with_value(PROFILE_CONFIG_ITEM)
        has_access_key = cs.exists_with_value(ACCESS_KEY_CONFIG_ITEM)
        has_secret_key = cs.exists_with_value(SECRET_KEY_CONFIG_ITEM)

        if has_profile and (has_access_key or has_secret_key):
            raise KubehopError(
                "A profile can't be used with an access key or secret key"
            )
        if has_access_key != has_secret_key:
            raise KubehopError("The access key and secret key are both required")

    def authenticate(self, cs: ConfigurationSet) -> AwsIdentity:
        logger.info("Using AWS IAM for authentication")
        cfg = unmarshal(cs, AwsIamConfig)

        try:
            session = boto3.Session(
                profile_name=cfg.profile or None,
                aws_access_key_id=cfg.access_key or None,
                aws_secret_access_key=cfg.secret_key or None,
                aws_session_token=cfg.session_token or None,
                region_name=cfg.region or None,
            )
            credentials = session.get_credentials()
        except ProfileNotFound as e:
            raise KubehopError(str(e)) from e

        if credentials is None:
            raise KubehopError("No AWS credentials found")

        frozen = credentials.get_frozen_credentials()
        logger.debug(f"Found AWS credentials using {credentials.method}")

        return AwsIdentity(
            provider=self.name,
            profile=cfg.profile,
            access_key=frozen.access_key,
            secret_key=frozen.secret_key,
            session_token=frozen.token,
            region=cfg.region,
        )


class EksDiscoveryProvider(DiscoveryProvider):
    name = "eks"
    supported_identity_providers = ["aws-iam"]
    usage_example = """
  # Discover EKS clusters using an AWS profile
  kubehop use eks --idp aws-iam --profile dev --region us-west-2

  # Discover an EKS cluster and add an alias to its connection history entry
  kubehop use eks --idp aws-iam --alias mycluster
"""

    def __init__(self, interactive: bool = False) -> None:
        super().__init__(interactive)
        self.config: Optional[EksConfig] = None
        self.identity: Optional[AwsIdentity] = None
        self.client: Any = None

    @classmethod
    def config_items(cls) -> ConfigurationSet:
        cs = shared_config()
        cs.add_string(
            ROLE_ARN_CONFIG_ITEM, "", "ARN of the AWS role to use for the cluster"
        )
        return cs

    def _setup(self, cs: ConfigurationSet, identity: Identity) -> None:
        if not isinstance(identity, AwsIdentity):
            raise KubehopError(f"The {self.name} provider requires an AWS identity")

        self.config = unmarshal(cs, EksConfig)
        self.identity = identity

        logger.debug(f"Creating EKS client for region {self.config.region}")
        session = boto3.Session(
            aws_access_key_id=identity.access_key,
            aws_secret_access_key=identity.secret_key,
            aws_session_token=identity.session_token,
            region_name=self.config.region or identity.region,
        )
        self.client = session.client("eks")

    def _list_clusters(self) -> List[str]:
        names: List[str] = []
        paginator = self.client.get_paginator("list_clusters")
        for page in paginator.paginate():
            names.extend(page.get("clusters", []))
        return names

    def _describe_cluster(self, name: str) -> Cluster:
        try:
            output = self.client.describe_cluster(name=name)
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                raise ClusterNotFoundError(name) from e
            raise

        cluster = output["cluster"]
        return Cluster(
            id=cluster["arn"],
            name=cluster["name"],
            endpoint=cluster.get("endpoint"),
            certificate_authority_data=cluster.get("certificateAuthority", {}).get(
                "data"
            ),
        )

    def discover(self, cs: ConfigurationSet, identity: Identity) -> Dict[str, Cluster]:
        self._setup(cs, identity)

        logger.info("Discovering EKS clusters...")
        clusters: Dict[str, Cluster] = {}
        for name in self._list_clusters():
            cluster = self._describe_cluster(name)
            clusters[cluster.id] = cluster

        if not clusters:
            logger.info("No EKS clusters discovered.")

        return clusters

    def get_cluster(
        self, cs: ConfigurationSet, identity: Identity, cluster_id: str
    ) -> Cluster:
        self._setup(cs, identity)

        logger.info(f"Getting EKS cluster {cluster_id}")
        return self._describe_cluster(cluster_name_from_arn(cluster_id))

    def get_config(
        self, cluster: Cluster, identity: Identity, namespace: Optional[str] = None
    ) -> Tuple[Dict[str, Any], str]:
        profile = identity.profile if isinstance(identity, AwsIdentity) else None
        region = (self.config.region if self.config else None) or getattr(
            identity, "region", None
        )

        cluster_name = f"eks-{cluster.name}"
        user_name = f"{profile or 'aws'}@{cluster_name}"
        context_name = user_name

        args = ["eks", "get-token", "--cluster-name", cluster.name]
        if region:
            args.extend(["--region", region])
        if self.config and self.config.role_arn:
            args.extend(["--role-arn", self.config.role_arn])

        exec_config: Dict[str, Any] = {
            "apiVersion": EXEC_API_VERSION,
            "command": "aws",
            "args": args,
            "interactiveMode": "IfAvailable",
            "provideClusterInfo": False,
        }
        if profile:
            exec_config["env"] = [{"name": "AWS_PROFILE", "value": profile}]

        context: Dict[str, Any] = {"cluster": cluster_name, "user": user_name}
        if namespace:
            context["namespace"] = namespace

        kubeconfig = {
            "apiVersion": "v1",
            "kind": "Config",
            "preferences": {},
            "clusters": [
                {
                    "name": cluster_name,
                    "cluster": {
                        "server": cluster.endpoint,
                        "certificate-authority-data": cluster.certificate_authority_data,
                    },
                }
            ],
            "contexts": [{"name": context_name, "context": context}],
            "users": [{"name": user_name, "user": {"exec": exec_config}}],
            "current-context": context_name,
        }

        return kubeconfig, context_name
