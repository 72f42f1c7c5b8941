"""Tests for ReconcilerConfig: defaults, environment parsing and validation."""

from __future__ import annotations

import json

import pytest

from eks_access.config import (
    ENV_VARS,
    Configuration,
    ConfigurationError,
    ReconcilerConfig,
    SerializationError,
    ValidationError,
)
from eks_access.constants import DEFAULT_POLICY_ARN


class TestDefaults:
    def test_defaults_grant_cluster_admin_on_cluster_scope(self):
        config = ReconcilerConfig()

        assert config.policy_arn == DEFAULT_POLICY_ARN
        assert config.policy_arn.endswith("AmazonEKSClusterAdminPolicy")
        assert config.access_scope == {"type": "cluster"}
        assert config.entry_type == "STANDARD"
        assert config.timeout_seconds == 60
        assert config.callback_reserve_seconds == 5
        assert config.max_workers == 1
        assert config.repair_existing_entries is False
        assert config.validate().success

    def test_namespace_scope_includes_namespaces(self):
        config = ReconcilerConfig(access_scope_type="namespace", access_scope_namespaces=["team-a", "team-b"])

        assert config.access_scope == {"type": "namespace", "namespaces": ["team-a", "team-b"]}

    def test_cluster_scope_ignores_namespaces(self):
        config = ReconcilerConfig(access_scope_namespaces=["ignored"])

        assert config.access_scope == {"type": "cluster"}


class TestFromEnvironment:
    def test_empty_environment_gives_defaults(self):
        assert ReconcilerConfig.from_environment({}) == ReconcilerConfig()

    def test_environment_values_are_parsed(self):
        environ = {
            "EKS_ACCESS_POLICY_ARN": "arn:aws:eks::aws:cluster-access-policy/AmazonEKSViewPolicy",
            "EKS_ACCESS_SCOPE_TYPE": "namespace",
            "EKS_ACCESS_SCOPE_NAMESPACES": "team-a, team-b,,",
            "EKS_ACCESS_TIMEOUT_SECONDS": "120",
            "EKS_ACCESS_CALLBACK_RESERVE_SECONDS": "7.5",
            "EKS_ACCESS_MAX_WORKERS": "4",
            "EKS_ACCESS_REPAIR_EXISTING": "true",
            "AWS_REGION": "eu-west-1",
        }

        config = ReconcilerConfig.from_environment(environ)

        assert config.policy_arn.endswith("AmazonEKSViewPolicy")
        assert config.access_scope_namespaces == ["team-a", "team-b"]
        assert config.timeout_seconds == 120.0
        assert config.callback_reserve_seconds == 7.5
        assert config.max_workers == 4
        assert config.repair_existing_entries is True
        assert config.region == "eu-west-1"
        assert config.validate().success

    def test_reads_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("EKS_ACCESS_MAX_WORKERS", "3")

        assert ReconcilerConfig.from_environment().max_workers == 3

    def test_blank_values_fall_back_to_defaults(self):
        config = ReconcilerConfig.from_environment({"EKS_ACCESS_POLICY_ARN": "", "EKS_ACCESS_MAX_WORKERS": ""})

        assert config.policy_arn == DEFAULT_POLICY_ARN
        assert config.max_workers == 1

    def test_overrides_win_over_environment(self):
        config = ReconcilerConfig.from_environment({"EKS_ACCESS_MAX_WORKERS": "4"}, max_workers=2, region=None)

        assert config.max_workers == 2

    @pytest.mark.parametrize("value", ["false", "0", "no", "off"])
    def test_repair_flag_false_values(self, value):
        config = ReconcilerConfig.from_environment({"EKS_ACCESS_REPAIR_EXISTING": value})

        assert config.repair_existing_entries is False

    def test_malformed_number_raises_serialization_error(self):
        with pytest.raises(SerializationError) as exc_info:
            ReconcilerConfig.from_environment({"EKS_ACCESS_TIMEOUT_SECONDS": "sixty"})

        assert "Invalid reconciler configuration value" in str(exc_info.value)

    def test_every_field_has_an_environment_variable(self):
        assert set(ENV_VARS) == set(ReconcilerConfig().to_dict())


class TestValidation:
    @pytest.mark.parametrize(
        "overrides, expected",
        [
            ({"policy_arn": "AmazonEKSClusterAdminPolicy"}, "Policy ARN must be an ARN"),
            ({"access_scope_type": "global"}, "Access scope type must be one of"),
            ({"access_scope_type": "namespace"}, "requires at least one namespace"),
            ({"entry_type": "FARGATE"}, "Access entry type must be one of"),
            ({"timeout_seconds": 0}, "Timeout must be positive"),
            ({"callback_reserve_seconds": -1}, "Callback reserve cannot be negative"),
            ({"callback_reserve_seconds": 60}, "Callback reserve must be smaller than the timeout"),
            ({"max_workers": 0}, "max_workers must be at least 1"),
            ({"callback_max_attempts": 0}, "callback_max_attempts must be at least 1"),
            ({"callback_timeout_seconds": 0}, "Callback timeout must be positive"),
        ],
    )
    def test_invalid_values_are_reported(self, overrides, expected):
        result = ReconcilerConfig(**overrides).validate()

        assert result.success is False
        assert any(expected in error for error in result.errors)

    def test_validate_or_raise_lists_every_error(self):
        config = ReconcilerConfig(policy_arn="bogus", max_workers=0)

        with pytest.raises(ValidationError) as exc_info:
            config.validate_or_raise()

        assert "Invalid reconciler configuration" in str(exc_info.value)
        assert "Policy ARN" in str(exc_info.value)
        assert "max_workers" in str(exc_info.value)

    def test_valid_configuration_does_not_raise(self):
        ReconcilerConfig().validate_or_raise()

    def test_validation_result_collects_all_errors(self):
        result = ReconcilerConfig(entry_type="FARGATE", timeout_seconds=0, callback_timeout_seconds=0).validate()

        assert len(result.errors) == 4
        assert result.success is False

    def test_configuration_errors_share_a_base_class(self):
        assert issubclass(ValidationError, ConfigurationError)
        assert issubclass(SerializationError, ConfigurationError)
        assert issubclass(ReconcilerConfig, Configuration)

    def test_abstract_configuration_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            Configuration()


class TestSerialization:
    def test_to_dict_is_json_compatible(self):
        config = ReconcilerConfig(access_scope_type="namespace", access_scope_namespaces=["team-a"])

        data = json.loads(json.dumps(config.to_dict()))

        assert ReconcilerConfig.from_dict(data) == config

    def test_from_dict_ignores_unknown_keys(self):
        config = ReconcilerConfig.from_dict({"max_workers": "2", "unexpected": "value"})

        assert config.max_workers == 2

    def test_from_dict_rejects_wrong_types(self):
        with pytest.raises(SerializationError):
            ReconcilerConfig.from_dict({"callback_max_attempts": None})
