"""
Default output artifact locations.

Output artifacts without an explicit location are placed in the controller's
default artifact repository (when one is configured) using:

    [<key_prefix>/]<workflow_name>/<pod_name>/<artifact_name>

e.g. store/my-wf-x7k2p/my-wf-x7k2p-1234567890/result

Artifacts with an explicit location in the template are left alone, which
lets a single step opt out of the default layout.
"""

from dataclasses import replace
from typing import Iterable

from wfpod.schemas import Artifact, ControllerConfig, S3Artifact


def artifact_key(key_prefix: str, workflow_name: str, pod_name: str, artifact_name: str) -> str:
    """Compute the storage key for an output artifact."""
    prefix = f"{key_prefix}/" if key_prefix else ""
    return f"{prefix}{workflow_name}/{pod_name}/{artifact_name}"


def inject_defaults(
    artifacts: Iterable[Artifact],
    pod_name: str,
    workflow_name: str,
    config: ControllerConfig,
) -> tuple[Artifact, ...]:
    """
    Fill in default repository locations for output artifacts.

    Args:
        artifacts: Output artifacts, in declaration order
        pod_name: Name of the pod producing them
        workflow_name: Name of the owning workflow
        config: Controller configuration

    Returns:
        The artifacts with locations filled in. Without a configured
        repository they come back unchanged; deciding whether that is
        an error is left to the executor.
    """
    s3_repo = config.artifact_repository.s3
    result = []
    for art in artifacts:
        if art.has_location or s3_repo is None:
            result.append(art)
            continue
        result.append(replace(art, s3=S3Artifact(
            bucket=s3_repo.bucket,
            key=artifact_key(s3_repo.key_prefix, workflow_name, pod_name, art.name),
            endpoint=s3_repo.endpoint,
            region=s3_repo.region,
            insecure=s3_repo.insecure,
            access_key_secret=s3_repo.access_key_secret,
            secret_key_secret=s3_repo.secret_key_secret,
        )))
    return tuple(result)
