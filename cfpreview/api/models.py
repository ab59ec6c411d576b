"""
Data models for Worker deployments and versions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ResourceKind(Enum):
    """The two kinds of deletable Worker resources."""
    DEPLOYMENT = "deployment"
    VERSION = "version"

    @property
    def path(self) -> str:
        """URL path segment under /workers/scripts/{script}/."""
        return f"{self.value}s"

    @property
    def list_key(self) -> str:
        """Key of the item list inside the listing `result` object."""
        return "deployments" if self is ResourceKind.DEPLOYMENT else "items"

    @property
    def noun(self) -> str:
        return self.value

    @property
    def plural(self) -> str:
        return f"{self.value}s"


@dataclass
class DeploymentVersion:
    version_id: str
    percentage: float


@dataclass
class Deployment:
    """A traffic-routing record for a Worker script."""
    id: str
    created_on: str
    author_email: str
    source: str = ""
    strategy: str = ""
    versions: List[DeploymentVersion] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Deployment":
        """Build from an API payload, tolerating missing optional fields."""
        if not data.get("id"):
            raise ValueError("deployment payload has no id")
        return cls(
            id=str(data["id"]),
            created_on=str(data.get("created_on") or ""),
            author_email=str(data.get("author_email") or ""),
            source=str(data.get("source") or ""),
            strategy=str(data.get("strategy") or ""),
            versions=[
                DeploymentVersion(
                    version_id=str(v.get("version_id", "")),
                    percentage=float(v.get("percentage", 0)),
                )
                for v in data.get("versions") or []
            ],
            raw=dict(data),
        )

    @property
    def author(self) -> str:
        return self.author_email or "unknown"

    @property
    def label(self) -> Optional[str]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.raw) if self.raw else {
            "id": self.id,
            "created_on": self.created_on,
            "author_email": self.author_email,
            "source": self.source,
            "strategy": self.strategy,
            "versions": [
                {"version_id": v.version_id, "percentage": v.percentage}
                for v in self.versions
            ],
        }


@dataclass
class Version:
    """
    An immutable snapshot of a Worker's code and configuration.

    Preview URLs are bound to versions, not deployments.
    """
    id: str
    number: int
    metadata: Dict[str, Any] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Version":
        """Build from an API payload, tolerating missing optional fields."""
        if not data.get("id"):
            raise ValueError("version payload has no id")
        return cls(
            id=str(data["id"]),
            number=int(data.get("number") or 0),
            metadata=dict(data.get("metadata") or {}),
            annotations=dict(data.get("annotations") or {}),
            raw=dict(data),
        )

    @property
    def created_on(self) -> str:
        return str(self.metadata.get("created_on") or "")

    @property
    def author(self) -> str:
        return self.metadata.get("author_email") or "unknown"

    @property
    def tag(self) -> Optional[str]:
        return self.annotations.get("workers/tag")

    @property
    def label(self) -> Optional[str]:
        label = f"#{self.number}"
        if self.tag:
            label += f" [{self.tag}]"
        return label

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.raw) if self.raw else {
            "id": self.id,
            "number": self.number,
            "metadata": dict(self.metadata),
            "annotations": dict(self.annotations),
        }


def resource_from_dict(kind: ResourceKind, data: Dict[str, Any]):
    """Build the model matching `kind` from an API payload."""
    if kind is ResourceKind.DEPLOYMENT:
        return Deployment.from_dict(data)
    return Version.from_dict(data)
