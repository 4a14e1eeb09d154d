"""
ExecutionUnit schema - the compiled pod, ready for submission.

An ExecutionUnit is built once per compile and never mutated afterwards.
to_manifest() renders it as a Kubernetes v1 Pod dict.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .template import Container
from .workflow import Volume


@dataclass(frozen=True)
class OwnerReference:
    """Links the pod to its workflow so deleting the workflow deletes the pod."""
    api_version: str
    kind: str
    name: str
    uid: str
    block_owner_deletion: bool = True
    controller: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "blockOwnerDeletion": self.block_owner_deletion,
            "controller": self.controller,
        }


@dataclass(frozen=True)
class ExecutionUnit:
    """
    A compiled workflow pod.

    Attributes:
        name: Deterministic pod name derived from workflow and step name
        namespace: Namespace the pod is created in
        labels: Workflow label and managed-by marker
        annotations: Step name and the serialized resolved template
        owner_references: Owning workflow
        init_containers: The staging role, when present
        containers: Monitor, main, then sidecars in declaration order
        volumes: Pod volumes
        restart_policy: Always "Never"; retries belong to the workflow
    """
    name: str
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    owner_references: tuple[OwnerReference, ...] = ()
    init_containers: tuple[Container, ...] = ()
    containers: tuple[Container, ...] = ()
    volumes: tuple[Volume, ...] = ()
    restart_policy: str = "Never"

    @property
    def roles(self) -> tuple[Container, ...]:
        """All roles in order: staging?, monitor, main, sidecars*."""
        return self.init_containers + self.containers

    def get_role(self, name: str) -> Optional[Container]:
        """Get a role by container name."""
        for ctr in self.roles:
            if ctr.name == name:
                return ctr
        return None

    def get_volume(self, name: str) -> Optional[Volume]:
        """Get a pod volume by name."""
        for vol in self.volumes:
            if vol.name == name:
                return vol
        return None

    def to_manifest(self) -> dict[str, Any]:
        """Render as a Kubernetes v1 Pod dict."""
        spec: dict[str, Any] = {
            "restartPolicy": self.restart_policy,
            **({"initContainers": [c.to_dict() for c in self.init_containers]}
               if self.init_containers else {}),
            "containers": [c.to_dict() for c in self.containers],
            "volumes": [v.to_dict() for v in self.volumes],
        }
        return {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "labels": dict(self.labels),
                "annotations": dict(self.annotations),
                "ownerReferences": [o.to_dict() for o in self.owner_references],
            },
            "spec": spec,
        }
