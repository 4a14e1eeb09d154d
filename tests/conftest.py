import pytest

from wfpod.schemas import (
    ArtifactRepository,
    Artifact,
    Container,
    ContainerInvocation,
    ControllerConfig,
    Inputs,
    S3Repository,
    Template,
    Volume,
    VolumeMount,
    WorkflowContext,
)


@pytest.fixture
def controller_config():
    return ControllerConfig(executor_image="wfpod/wfpodexec:test")


@pytest.fixture
def s3_controller_config():
    return ControllerConfig(
        executor_image="wfpod/wfpodexec:test",
        artifact_repository=ArtifactRepository(
            s3=S3Repository(
                bucket="my-bucket",
                endpoint="s3.amazonaws.com",
                key_prefix="store",
            )
        ),
    )


@pytest.fixture
def workflow_ctx(controller_config):
    return WorkflowContext(
        name="my-wf",
        uid="0b6e7f2a-1111-2222-3333-444455556666",
        namespace="workflows",
        config=controller_config,
        volumes=(
            Volume(name="data-vol", source={"persistentVolumeClaim": {"claimName": "data"}}),
            Volume(name="cache", source={"emptyDir": {}}),
        ),
        persistent_volume_claims=(
            Volume(name="workdir", source={"persistentVolumeClaim": {"claimName": "my-wf-workdir"}}),
        ),
    )


@pytest.fixture
def busybox_template():
    """Container template with one input artifact CODE at /src."""
    return Template(
        name="build",
        invocation=ContainerInvocation(Container(
            image="busybox",
            command=("sh", "-c"),
            args=("ls /src",),
        )),
        inputs=Inputs(artifacts=(Artifact(name="CODE", path="/src"),)),
    )


@pytest.fixture
def make_template():
    """Factory for container templates with the given explicit mounts."""
    def _make(*mounts: VolumeMount, **kwargs) -> Template:
        return Template(
            name=kwargs.pop("name", "step"),
            invocation=ContainerInvocation(Container(
                image=kwargs.pop("image", "busybox"),
                volume_mounts=tuple(mounts),
            )),
            **kwargs,
        )
    return _make
