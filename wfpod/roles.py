"""
Role containers and platform volumes shared by every workflow pod.

Every value here is built by a function call, so one compile can never
leak a change into another through a shared module-level object.
"""

from dataclasses import replace
from typing import Any, Optional

from wfpod import common
from wfpod.schemas import Container, ControllerConfig, Volume, VolumeMount


def env_from_field(name: str, field_path: str) -> dict[str, Any]:
    """An EnvVar sourced from the pod's own metadata (downward API)."""
    return {
        "name": name,
        "valueFrom": {
            "fieldRef": {
                "apiVersion": "v1",
                "fieldPath": field_path,
            }
        },
    }


def executor_env() -> tuple[dict[str, Any], ...]:
    """Pod information exposed to the executor containers."""
    return (
        env_from_field(common.ENV_VAR_HOST_IP, "status.hostIP"),
        env_from_field(common.ENV_VAR_POD_IP, "status.podIP"),
        env_from_field(common.ENV_VAR_POD_NAME, "metadata.name"),
        env_from_field(common.ENV_VAR_NAMESPACE, "metadata.namespace"),
    )


def executor_resources() -> dict[str, Any]:
    return {
        "limits": {
            "cpu": common.EXECUTOR_CPU_LIMIT,
            "memory": common.EXECUTOR_MEMORY_LIMIT,
        },
        "requests": {
            "cpu": common.EXECUTOR_CPU_REQUEST,
            "memory": common.EXECUTOR_MEMORY_REQUEST,
        },
    }


def build_role(
    name: str,
    image: str,
    privileged: bool = False,
    image_pull_policy: Optional[str] = None,
) -> Container:
    """
    Build the base container for a managed role.

    Args:
        name: Fixed role name (init, wait)
        image: Executor image from the controller configuration
        privileged: Security posture requested for the role
        image_pull_policy: Optional pull policy for the executor image

    Returns:
        A fresh Container with executor env vars, bounded resources
        and the requested security context
    """
    return Container(
        name=name,
        image=image,
        env=executor_env(),
        resources=executor_resources(),
        image_pull_policy=image_pull_policy,
        security_context={"privileged": privileged},
    )


# -----------------------------------------------------------------------------
# Platform volumes
# -----------------------------------------------------------------------------


def pod_metadata_volume() -> Volume:
    """The pod's annotations, exposed as a file through the downward API."""
    return Volume(
        name=common.POD_METADATA_VOLUME_NAME,
        source={
            "downwardAPI": {
                "items": [
                    {
                        "path": common.POD_METADATA_ANNOTATIONS_VOLUME_PATH,
                        "fieldRef": {
                            "apiVersion": "v1",
                            "fieldPath": "metadata.annotations",
                        },
                    }
                ]
            }
        },
    )


def pod_metadata_mount() -> VolumeMount:
    return VolumeMount(
        name=common.POD_METADATA_VOLUME_NAME,
        mount_path=common.POD_METADATA_MOUNT_PATH,
    )


def docker_lib_volume() -> Volume:
    """
    The node's container runtime storage.

    The monitor needs it to read the main container's logs and
    filesystem after it exits.
    """
    return Volume(
        name=common.DOCKER_LIB_VOLUME_NAME,
        source={
            "hostPath": {
                "path": common.DOCKER_LIB_HOST_PATH,
                "type": "Directory",
            }
        },
    )


def docker_lib_mount() -> VolumeMount:
    return VolumeMount(
        name=common.DOCKER_LIB_VOLUME_NAME,
        mount_path=common.DOCKER_LIB_HOST_PATH,
        read_only=True,
    )


def empty_dir_volume(name: str) -> Volume:
    return Volume(name=name, source={"emptyDir": {}})


# -----------------------------------------------------------------------------
# Managed roles
# -----------------------------------------------------------------------------


def new_staging_role(config: ControllerConfig) -> Container:
    """The init container: loads input artifacts and the script source."""
    ctr = build_role(
        common.INIT_CONTAINER_NAME,
        config.executor_image,
        image_pull_policy=config.executor_image_pull_policy,
    )
    return replace(
        ctr,
        command=(common.EXECUTOR_BINARY, "init"),
        volume_mounts=(pod_metadata_mount(),),
    )


def new_monitor_role(config: ControllerConfig) -> Container:
    """The wait container: watches main and saves its outputs."""
    ctr = build_role(
        common.WAIT_CONTAINER_NAME,
        config.executor_image,
        image_pull_policy=config.executor_image_pull_policy,
    )
    return replace(
        ctr,
        command=(common.EXECUTOR_BINARY, "wait"),
        volume_mounts=(pod_metadata_mount(), docker_lib_mount()),
    )
