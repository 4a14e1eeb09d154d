"""
Pod submission with idempotent creation.

Pod names are deterministic (see wfpod.identity), so a pod that already
exists with our name can only come from an earlier attempt that created it
before the controller managed to record that. submit_unit() therefore
reports "already exists" as a normal outcome next to "created".

This module defines the protocol that any pod client must implement,
keeping submission decoupled from the cluster API.

Implementations:
- InMemoryPodClient: For testing and dry-run mode
- KubernetesPodClient: Real implementation using the kubernetes client
"""

import logging
from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException

from wfpod.errors import AlreadyExistsError, ConfigError, InternalError
from wfpod.schemas import ExecutionUnit

logger = logging.getLogger(__name__)


class SubmitOutcome(str, Enum):
    """Successful submission outcomes."""
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


@runtime_checkable
class PodClient(Protocol):
    """Protocol for creating pods on the cluster."""

    def create_pod(
        self,
        namespace: str,
        manifest: dict[str, Any],
        timeout: Optional[float] = None,
    ) -> str:
        """
        Create a pod.

        Args:
            namespace: Target namespace
            manifest: Kubernetes v1 Pod dict
            timeout: Request timeout in seconds (None = client default)

        Returns:
            Name of the created pod

        Raises:
            AlreadyExistsError: If a pod with this name already exists
            Exception: Any other failure
        """
        ...


class InMemoryPodClient:
    """
    Dict-backed pod client for tests and dry runs.

    Pods are keyed by (namespace, name).
    """

    def __init__(self) -> None:
        self.pods: dict[tuple[str, str], dict[str, Any]] = {}

    def create_pod(
        self,
        namespace: str,
        manifest: dict[str, Any],
        timeout: Optional[float] = None,
    ) -> str:
        name = manifest["metadata"]["name"]
        if (namespace, name) in self.pods:
            raise AlreadyExistsError(name)
        self.pods[(namespace, name)] = manifest
        return name

    def get_pod(self, namespace: str, name: str) -> Optional[dict[str, Any]]:
        return self.pods.get((namespace, name))


class KubernetesPodClient:
    """
    Pod client backed by the official kubernetes Python client.

    Usage:
        client = KubernetesPodClient.from_config()
        submit_unit(unit, client, timeout=30)
    """

    def __init__(self, core_api: Optional[k8s_client.CoreV1Api] = None):
        self._core_api = core_api if core_api is not None else k8s_client.CoreV1Api()

    @classmethod
    def from_config(
        cls,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
    ) -> "KubernetesPodClient":
        """
        Load cluster credentials and build a client.

        Uses the in-cluster service account when no kubeconfig is given
        and one is available, otherwise the kubeconfig file.
        """
        if kubeconfig is None:
            try:
                k8s_config.load_incluster_config()
                return cls()
            except k8s_config.ConfigException:
                pass
        try:
            k8s_config.load_kube_config(config_file=kubeconfig, context=context)
        except k8s_config.ConfigException as e:
            raise ConfigError(f"Could not load kubeconfig: {e}") from e
        return cls()

    def create_pod(
        self,
        namespace: str,
        manifest: dict[str, Any],
        timeout: Optional[float] = None,
    ) -> str:
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["_request_timeout"] = timeout
        try:
            created = self._core_api.create_namespaced_pod(namespace, manifest, **kwargs)
        except ApiException as e:
            if e.status == 409:
                raise AlreadyExistsError(manifest["metadata"]["name"]) from e
            raise
        return created.metadata.name


def submit_unit(
    unit: ExecutionUnit,
    client: PodClient,
    timeout: Optional[float] = None,
) -> SubmitOutcome:
    """
    Submit a compiled unit to the cluster.

    Args:
        unit: The compiled ExecutionUnit
        client: Pod client to create it with
        timeout: Request timeout in seconds

    Returns:
        SubmitOutcome.CREATED or SubmitOutcome.ALREADY_EXISTS

    Raises:
        InternalError: For any other failure, timeouts included. The caller
            should retry the whole reconciliation pass, not just this call.
    """
    try:
        created = client.create_pod(unit.namespace, unit.to_manifest(), timeout=timeout)
    except AlreadyExistsError:
        logger.info(f"pod {unit.name} already exists", extra={"pod": unit.name})
        return SubmitOutcome.ALREADY_EXISTS
    except InternalError:
        raise
    except Exception as e:
        logger.error(f"Failed to create pod {unit.name}: {e}", extra={"pod": unit.name})
        raise InternalError.wrap(e, f"failed to create pod {unit.name}: {e}")
    logger.info(f"Created pod: {created}", extra={"pod": unit.name})
    return SubmitOutcome.CREATED
