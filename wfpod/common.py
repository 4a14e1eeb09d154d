"""
Names, paths and metadata keys shared by the controller and the executor.

The executor (wfpodexec) runs inside the staging and monitor containers and
relies on these exact values to find the pod metadata, the artifacts volume
and the script source.
"""

import posixpath

# Metadata keys
GROUP = "wfpod.io"
API_VERSION = f"{GROUP}/v1alpha1"
WORKFLOW_KIND = "Workflow"

LABEL_KEY_WORKFLOW = f"{GROUP}/workflow"
LABEL_KEY_MANAGED = f"{GROUP}/managed"
ANNOTATION_KEY_NODE_NAME = f"{GROUP}/node-name"
ANNOTATION_KEY_TEMPLATE = f"{GROUP}/template"

# Container (role) names
MAIN_CONTAINER_NAME = "main"
INIT_CONTAINER_NAME = "init"
WAIT_CONTAINER_NAME = "wait"

# Executor command
EXECUTOR_BINARY = "wfpodexec"

# Pod metadata volume: the pod annotations exposed as a file
POD_METADATA_VOLUME_NAME = "podmetadata"
POD_METADATA_MOUNT_PATH = "/wfpod/podmetadata"
POD_METADATA_ANNOTATIONS_VOLUME_PATH = "annotations"
POD_METADATA_ANNOTATIONS_PATH = posixpath.join(
    POD_METADATA_MOUNT_PATH, POD_METADATA_ANNOTATIONS_VOLUME_PATH
)

# Container runtime storage on the host, read by the monitor
DOCKER_LIB_VOLUME_NAME = "docker-lib"
DOCKER_LIB_HOST_PATH = "/var/lib/docker"

# Input artifacts
INPUT_ARTIFACTS_VOLUME_NAME = "input-artifacts"
EXECUTOR_ARTIFACT_BASE_DIR = "/wfpod/inputs/artifacts"
# Where the staging role sees the main container's explicit mounts
EXECUTOR_MAIN_FILESYSTEM_DIR = "/mainctrfs"

# Script templates
SCRIPT_VOLUME_NAME = "script"
SCRIPT_TEMPLATE_EMPTY_DIR = "/wfpod/script"
SCRIPT_TEMPLATE_SOURCE_PATH = posixpath.join(SCRIPT_TEMPLATE_EMPTY_DIR, "source")

# Environment variables exposed to the executor containers
ENV_VAR_HOST_IP = "WFPOD_HOST_IP"
ENV_VAR_POD_IP = "WFPOD_POD_IP"
ENV_VAR_POD_NAME = "WFPOD_POD_NAME"
ENV_VAR_NAMESPACE = "WFPOD_NAMESPACE"

# Executor resource bounds
EXECUTOR_CPU_REQUEST = "0.1"
EXECUTOR_MEMORY_REQUEST = "64Mi"
EXECUTOR_CPU_LIMIT = "0.5"
EXECUTOR_MEMORY_LIMIT = "512Mi"

RESTART_POLICY_NEVER = "Never"
