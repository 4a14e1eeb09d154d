"""
wfpod.schemas - Schema definitions for pod synthesis.

Template + WorkflowContext -> ExecutionUnit

Lifecycle:
1. Template: one workflow step, read-only input (container or script invocation)
2. WorkflowContext: the owning workflow's identity, volumes and controller config
3. ExecutionUnit: the compiled pod, submitted once and never mutated
"""

from .template import (
    VolumeMount,
    Container,
    ContainerInvocation,
    ScriptInvocation,
    Invocation,
    Parameter,
    SecretKeySelector,
    S3Artifact,
    GitArtifact,
    HTTPArtifact,
    Artifact,
    Inputs,
    Outputs,
    Sidecar,
    Template,
)
from .workflow import (
    Volume,
    S3Repository,
    ArtifactRepository,
    ControllerConfig,
    WorkflowContext,
)
from .unit import (
    OwnerReference,
    ExecutionUnit,
)

__all__ = [
    # Template
    "VolumeMount",
    "Container",
    "ContainerInvocation",
    "ScriptInvocation",
    "Invocation",
    "Parameter",
    "SecretKeySelector",
    "S3Artifact",
    "GitArtifact",
    "HTTPArtifact",
    "Artifact",
    "Inputs",
    "Outputs",
    "Sidecar",
    "Template",
    # Workflow
    "Volume",
    "S3Repository",
    "ArtifactRepository",
    "ControllerConfig",
    "WorkflowContext",
    # Unit
    "OwnerReference",
    "ExecutionUnit",
]
