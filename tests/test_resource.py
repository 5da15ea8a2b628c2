"""
Unit tests for the Kubernetes resource model.
"""

import os
import sys

import pytest
import yaml
from pydantic import ValidationError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from kubecli.modules.resource import KubernetesResource

MANIFEST = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: test-deployment
  namespace: test
  labels:
    foo: bar
spec:
  replicas: 1
"""


class TestKubernetesResource:
    """Test KubernetesResource parsing and serialization."""

    def test_from_yaml(self):
        res = KubernetesResource.from_yaml(MANIFEST)

        assert res.kind == "Deployment"
        assert res.api_version == "apps/v1"
        assert res.metadata.name == "test-deployment"
        assert res.metadata.namespace == "test"
        assert res.metadata.labels == {"foo": "bar"}

    def test_to_yaml_keeps_unknown_fields(self):
        res = KubernetesResource.from_yaml(MANIFEST)
        data = yaml.safe_load(res.to_yaml())

        assert data["apiVersion"] == "apps/v1"
        assert data["spec"] == {"replicas": 1}
        assert "annotations" not in data["metadata"]

    def test_populate_by_field_name(self):
        res = KubernetesResource(api_version="v1", kind="ConfigMap", metadata={"name": "x"})
        assert res.to_dict()["apiVersion"] == "v1"

    def test_kind_is_required(self):
        with pytest.raises(ValidationError):
            KubernetesResource.from_dict({"apiVersion": "v1"})

    def test_load_all_reads_every_document(self):
        stream = MANIFEST + "---\n" + "apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: cm\n---\n"

        resources = KubernetesResource.load_all(stream)

        assert [r.kind for r in resources] == ["Deployment", "ConfigMap"]
        assert resources[1].metadata.name == "cm"

    def test_load_all_rejects_non_mapping_document(self):
        with pytest.raises(ValueError):
            KubernetesResource.load_all(MANIFEST + "---\n- a list\n")

    def test_non_mapping_document_rejected(self):
        with pytest.raises(ValueError):
            KubernetesResource.from_yaml("- just\n- a list\n")
