"""Tests for cluster, access entry and completion domain objects."""

import pytest

from eks_access.domain import (
    AccessPolicyAssociation,
    AuthenticationMode,
    ClusterDescriptor,
    CompletionSignal,
    CompletionStatus,
)


class TestAuthenticationMode:
    @pytest.mark.parametrize(
        "value, supported",
        [
            ("API", True),
            ("API_AND_CONFIG_MAP", True),
            ("CONFIG_MAP", False),
            ("SOMETHING_NEW", False),
            (None, False),
        ],
    )
    def test_supports_access_entries(self, value, supported):
        assert AuthenticationMode.parse(value).supports_access_entries is supported

    def test_unrecognised_value_is_unknown(self):
        assert AuthenticationMode.parse("api") is AuthenticationMode.UNKNOWN


class TestClusterDescriptor:
    def test_from_api(self):
        descriptor = ClusterDescriptor.from_api({"name": "a", "accessConfig": {"authenticationMode": "API"}})

        assert descriptor == ClusterDescriptor("a", AuthenticationMode.API)

    def test_from_api_with_null_access_config(self):
        descriptor = ClusterDescriptor.from_api({"name": "a", "accessConfig": None})

        assert descriptor.authentication_mode is AuthenticationMode.UNKNOWN


class TestAccessPolicyAssociation:
    def test_default_scope_is_cluster(self):
        association = AccessPolicyAssociation("a", "role-X", "arn:policy/admin")

        assert association.access_scope == {"type": "cluster"}

    def test_associations_are_hashable(self):
        first = AccessPolicyAssociation("a", "role-X", "arn:policy/admin")
        second = AccessPolicyAssociation("a", "role-X", "arn:policy/admin", {"type": "cluster"})

        assert first == second
        assert len({first, second}) == 1


class TestCompletionSignal:
    def test_success(self):
        signal = CompletionSignal.success({"UpdatedClusters": "a"})

        assert signal.succeeded
        assert signal.reason is None
        assert signal.to_dict() == {"Status": "SUCCESS", "Reason": None, "Data": {"UpdatedClusters": "a"}}

    def test_failed(self):
        signal = CompletionSignal.failed("missing roleArn")

        assert signal.status is CompletionStatus.FAILED
        assert not signal.succeeded
        assert signal.to_dict()["Reason"] == "missing roleArn"
        assert signal.data == {}

    def test_data_is_copied(self):
        data = {"UpdatedClusters": "a"}
        signal = CompletionSignal.success(data)
        data["UpdatedClusters"] = "b"

        assert signal.data == {"UpdatedClusters": "a"}
