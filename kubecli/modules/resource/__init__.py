"""
Resource Module - Black Box Interface

Purpose: Minimal Kubernetes object model handed to `apply`
Interface: KubernetesResource (to_yaml/from_yaml/from_dict), ResourceLike protocol
Hidden: YAML serialization details, field aliasing

Any object exposing `kind`, `metadata.name` and `to_yaml()` can be applied;
this model is the stock implementation.
"""

from typing import Any, Dict, List, Optional, Protocol

import yaml
from pydantic import BaseModel, ConfigDict, Field


class ResourceMetadata(Protocol):
    name: Optional[str]


class ResourceLike(Protocol):
    """What `KubernetesCLI.apply` needs from a resource."""

    kind: str
    metadata: ResourceMetadata

    def to_yaml(self) -> str: ...


class ObjectMeta(BaseModel):
    """Identity and labelling metadata of a Kubernetes object."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(None, description="Object name")
    namespace: Optional[str] = Field(None, description="Object namespace")
    labels: Optional[Dict[str, str]] = Field(None, description="Object labels")
    annotations: Optional[Dict[str, str]] = Field(None, description="Object annotations")


class KubernetesResource(BaseModel):
    """A Kubernetes object; fields other than identity are kept as-is."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: str = Field(..., alias="apiVersion", description="API group/version")
    kind: str = Field(..., description="Object kind, e.g. ConfigMap")
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KubernetesResource":
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, document: str) -> "KubernetesResource":
        data = yaml.safe_load(document)
        if not isinstance(data, dict):
            raise ValueError("YAML document does not describe a Kubernetes object")
        return cls.from_dict(data)

    @classmethod
    def load_all(cls, stream: str) -> List["KubernetesResource"]:
        """Parse every document of a (possibly multi-document) manifest."""
        resources = []
        for data in yaml.safe_load_all(stream):
            if data is None:
                continue
            if not isinstance(data, dict):
                raise ValueError("YAML document does not describe a Kubernetes object")
            resources.append(cls.from_dict(data))
        return resources

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False)


__all__ = ["KubernetesResource", "ObjectMeta", "ResourceLike", "ResourceMetadata"]
