"""
Workflow context - everything outside the template that pod synthesis reads.

The context is owned by the reconciliation loop and treated as read-only:
the workflow's identity, the volumes it declares, the volume claims it
provisioned (recorded in its status), and the controller configuration.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .template import SecretKeySelector


@dataclass(frozen=True)
class Volume:
    """
    A pod volume: a name plus a Kubernetes volume source.

    source is the remainder of the Kubernetes Volume dict, e.g.
    {"persistentVolumeClaim": {"claimName": "data"}} or {"emptyDir": {}}.
    """
    name: str
    source: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, **self.source}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Volume":
        return cls(
            name=data["name"],
            source={k: v for k, v in data.items() if k != "name"},
        )


@dataclass(frozen=True)
class S3Repository:
    """Default S3 artifact repository configured on the controller."""
    bucket: str
    endpoint: Optional[str] = None
    region: Optional[str] = None
    insecure: bool = False
    key_prefix: str = ""
    access_key_secret: Optional[SecretKeySelector] = None
    secret_key_secret: Optional[SecretKeySelector] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "S3Repository":
        return cls(
            bucket=data["bucket"],
            endpoint=data.get("endpoint"),
            region=data.get("region"),
            insecure=data.get("insecure", False),
            key_prefix=data.get("keyPrefix", ""),
            access_key_secret=SecretKeySelector.from_dict(data.get("accessKeySecret")),
            secret_key_secret=SecretKeySelector.from_dict(data.get("secretKeySecret")),
        )


@dataclass(frozen=True)
class ArtifactRepository:
    s3: Optional[S3Repository] = None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "ArtifactRepository":
        data = data or {}
        return cls(s3=S3Repository.from_dict(data["s3"]) if data.get("s3") else None)


@dataclass(frozen=True)
class ControllerConfig:
    """
    Controller-wide settings used during pod synthesis.

    Attributes:
        executor_image: Image running the staging and monitor roles
        executor_image_pull_policy: Optional pull policy for that image
        artifact_repository: Default location for output artifacts
    """
    executor_image: str
    executor_image_pull_policy: Optional[str] = None
    artifact_repository: ArtifactRepository = field(default_factory=ArtifactRepository)


@dataclass(frozen=True)
class WorkflowContext:
    """
    The owning workflow, as seen by pod synthesis.

    Attributes:
        name: Workflow name, used for labels and artifact keys
        uid: Workflow UID, used for the owner reference
        namespace: Namespace pods are created in
        volumes: Volumes declared in the workflow spec
        persistent_volume_claims: Claims provisioned for the workflow (status)
        config: Controller configuration
    """
    name: str
    uid: str
    namespace: str
    config: ControllerConfig
    volumes: tuple[Volume, ...] = ()
    persistent_volume_claims: tuple[Volume, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any], config: ControllerConfig) -> "WorkflowContext":
        """
        Build a context from a Workflow object dict.

        Reads metadata.name/uid/namespace, spec.volumes and
        status.persistentVolumeClaims.
        """
        metadata = data.get("metadata", {})
        spec = data.get("spec", {})
        status = data.get("status", {})
        return cls(
            name=metadata["name"],
            uid=metadata.get("uid", ""),
            namespace=metadata.get("namespace", "default"),
            config=config,
            volumes=tuple(Volume.from_dict(v) for v in spec.get("volumes", [])),
            persistent_volume_claims=tuple(
                Volume.from_dict(v) for v in status.get("persistentVolumeClaims", [])
            ),
        )
