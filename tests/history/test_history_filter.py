from typing import Dict, List

import pytest

from kubehop.errors import InvalidFilterInputError
from kubehop.history.entry import (
    HistoryEntry,
    new_history_entry,
    new_history_entry_list,
)
from kubehop.history.filter import (
    FilterSpec,
    by_alias,
    create_filter_from_map,
    equals_with_wildcard,
    filter_history,
    parse_key_values,
)


def _entry(alias: str, provider: str, flags: Dict[str, str]) -> HistoryEntry:
    entry = new_history_entry()
    entry.spec.alias = alias
    entry.spec.provider = provider
    entry.spec.identity = "aws-iam" if provider == "eks" else "oidc"
    entry.spec.provider_id = f"{provider}-{alias}"
    entry.spec.flags = flags
    return entry


HISTORY = new_history_entry_list(
    [
        _entry("dev1", "eks", {"region": "eu-west-1", "partition": "aws"}),
        _entry("dev2", "eks", {"region": "us-east-1", "partition": "aws"}),
        _entry("prod", "rancher", {"username": "bob"}),
    ]
)


def _aliases(spec: FilterSpec) -> List[str]:
    return [entry.alias_or_blank for entry in filter_history(HISTORY, spec).items]


@pytest.mark.parametrize(
    "pattern, value, expected",
    [
        ("*match", "thisshouldmatch", True),
        ("match*", "matchthisshould", True),
        ("*match*", "thismatchshould", True),
        ("match", "match", True),
        ("match*", "thisshouldnotmatch", False),
        ("*match", "matchthisshouldnot", False),
        ("*match*", "nothing", False),
        ("match", "matches", False),
        ("*", "anything", True),
    ],
)
def test_equals_with_wildcard(pattern: str, value: str, expected: bool) -> None:
    assert equals_with_wildcard(pattern, value) is expected


def test_empty_spec_matches_everything() -> None:
    assert _aliases(FilterSpec()) == ["dev1", "dev2", "prod"]


def test_filter_by_alias() -> None:
    assert _aliases(FilterSpec(alias="dev*")) == ["dev1", "dev2"]
    assert _aliases(FilterSpec(alias="*2")) == ["dev2"]


def test_filter_by_providers() -> None:
    assert _aliases(FilterSpec(cluster_provider="rancher")) == ["prod"]
    assert _aliases(FilterSpec(identity_provider="aws*")) == ["dev1", "dev2"]
    assert _aliases(FilterSpec(provider_id="eks-dev1")) == ["dev1"]


def test_filter_by_flags() -> None:
    assert _aliases(FilterSpec(flags={"region": "*-west-*"})) == ["dev1"]
    assert _aliases(FilterSpec(flags={"username": "bob"})) == ["prod"]
    # every flag must be present and match
    assert _aliases(FilterSpec(flags={"region": "*", "username": "bob"})) == []


def test_filter_conjunction() -> None:
    spec = FilterSpec(alias="dev1", flags={"region": "eu-west-1"})
    assert _aliases(spec) == ["dev1"]

    spec = FilterSpec(alias="dev1", flags={"region": "us-east-1"})
    assert _aliases(spec) == []


def test_filter_with_custom_funcs() -> None:
    spec = FilterSpec(alias="prod", flags={"region": "eu-west-1"})
    result = filter_history(HISTORY, spec, [by_alias])
    assert [entry.alias_or_blank for entry in result.items] == ["prod"]


def test_filter_does_not_change_source() -> None:
    filter_history(HISTORY, FilterSpec(alias="prod"))
    assert len(HISTORY.items) == 3


def test_filter_invalid_input() -> None:
    with pytest.raises(InvalidFilterInputError):
        filter_history(None, FilterSpec())

    with pytest.raises(InvalidFilterInputError):
        filter_history(HISTORY, None)


def test_create_filter_from_map() -> None:
    spec = create_filter_from_map(
        {
            "alias": "dev*",
            "cluster-provider": "eks",
            "id": "01hq",
            "identity-provider": "aws-iam",
            "kubeconfig": "/tmp/config",
            "provider-id": "eks-dev1",
            "region": "eu-west-1",
        }
    )

    assert spec.alias == "dev*"
    assert spec.cluster_provider == "eks"
    assert spec.history_id == "01hq"
    assert spec.identity_provider == "aws-iam"
    assert spec.kubeconfig == "/tmp/config"
    assert spec.provider_id == "eks-dev1"
    assert spec.flags == {"region": "eu-west-1"}


def test_parse_key_values() -> None:
    assert parse_key_values("") == {}
    assert parse_key_values("alias=dev*, region=eu-west-1") == {
        "alias": "dev*",
        "region": "eu-west-1",
    }
    assert parse_key_values("namespace=") == {"namespace": ""}

    with pytest.raises(ValueError):
        parse_key_values("alias")

    with pytest.raises(ValueError):
        parse_key_values("=dev")
