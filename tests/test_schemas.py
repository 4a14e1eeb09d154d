"""Tests for wfpod.schemas module.

Tests Template parsing (container/script discrimination, artifacts, sidecars),
WorkflowContext parsing and ExecutionUnit manifest rendering.
"""

import pytest

from wfpod.errors import BadRequestError
from wfpod.schemas import (
    Artifact,
    Container,
    ContainerInvocation,
    ControllerConfig,
    ExecutionUnit,
    GitArtifact,
    OwnerReference,
    S3Artifact,
    ScriptInvocation,
    Template,
    Volume,
    VolumeMount,
    WorkflowContext,
)


# =============================================================================
# Template TESTS
# =============================================================================


class TestTemplateFromDict:
    """Tests for Template.from_dict."""

    def test_container_template(self):
        tmpl = Template.from_dict({
            "name": "hello",
            "container": {
                "image": "busybox",
                "command": ["echo"],
                "args": ["hello"],
                "volumeMounts": [{"name": "data-vol", "mountPath": "/data", "readOnly": True}],
            },
        })
        assert isinstance(tmpl.invocation, ContainerInvocation)
        ctr = tmpl.invocation.container
        assert ctr.image == "busybox"
        assert ctr.command == ("echo",)
        assert ctr.args == ("hello",)
        assert ctr.volume_mounts == (VolumeMount(name="data-vol", mount_path="/data", read_only=True),)
        assert not tmpl.is_script

    def test_script_template(self):
        tmpl = Template.from_dict({
            "name": "py",
            "script": {"image": "python:3", "command": ["python"], "source": "print(1)"},
        })
        assert tmpl.invocation == ScriptInvocation(image="python:3", command=("python",), source="print(1)")
        assert tmpl.is_script

    def test_neither_container_nor_script(self):
        """Representable so the compiler can report it as internal."""
        tmpl = Template.from_dict({"name": "empty"})
        assert tmpl.invocation is None

    def test_both_container_and_script_rejected(self):
        with pytest.raises(BadRequestError, match="exactly one"):
            Template.from_dict({
                "name": "both",
                "container": {"image": "busybox"},
                "script": {"image": "python:3", "source": ""},
            })

    def test_artifacts_and_sidecars(self):
        tmpl = Template.from_dict({
            "name": "t",
            "container": {"image": "busybox"},
            "inputs": {
                "parameters": [{"name": "msg", "value": "hi"}],
                "artifacts": [
                    {"name": "CODE", "path": "/src", "git": {"repo": "https://example.com/r.git"}},
                ],
            },
            "outputs": {"artifacts": [{"name": "result", "path": "/out"}]},
            "sidecars": [{"name": "db", "image": "postgres", "mirrorVolumeMounts": True}],
        })
        art = tmpl.inputs.artifacts[0]
        assert art.git == GitArtifact(repo="https://example.com/r.git")
        assert art.has_location
        assert not tmpl.outputs.artifacts[0].has_location
        assert tmpl.inputs.parameters[0].value == "hi"
        assert tmpl.sidecars[0].container.name == "db"
        assert tmpl.sidecars[0].mirror_volume_mounts

    def test_round_trip_preserves_dict(self):
        data = {
            "name": "t",
            "container": {
                "image": "busybox",
                "volumeMounts": [{"name": "v", "mountPath": "/v", "subPath": "x", "mountPropagation": "None"}],
                "ports": [{"containerPort": 8080}],
                "tty": True,
            },
            "inputs": {"artifacts": [{"name": "CODE", "path": "/src"}]},
            "outputs": {"artifacts": [{"name": "out", "s3": {"bucket": "b", "key": "k"}}]},
        }
        assert Template.from_dict(data).to_dict() == data


class TestArtifact:
    """Tests for Artifact invariants."""

    def test_empty_name_rejected(self):
        with pytest.raises(BadRequestError):
            Artifact(name="")

    def test_has_location(self):
        assert not Artifact(name="a").has_location
        assert Artifact(name="a", s3=S3Artifact(bucket="b", key="k")).has_location


class TestContainer:
    """Tests for Container.to_dict."""

    def test_omits_empty_fields(self):
        assert Container(name="main", image="busybox").to_dict() == {
            "name": "main",
            "image": "busybox",
        }

    def test_security_context_kept_when_unprivileged(self):
        d = Container(name="wait", image="x", security_context={"privileged": False}).to_dict()
        assert d["securityContext"] == {"privileged": False}


# =============================================================================
# WorkflowContext TESTS
# =============================================================================


class TestWorkflowContext:
    """Tests for WorkflowContext.from_dict."""

    def test_from_workflow_object(self):
        config = ControllerConfig(executor_image="exec:1")
        ctx = WorkflowContext.from_dict({
            "metadata": {"name": "wf", "uid": "u-1", "namespace": "ns"},
            "spec": {"volumes": [{"name": "data", "persistentVolumeClaim": {"claimName": "c"}}]},
            "status": {"persistentVolumeClaims": [{"name": "work", "persistentVolumeClaim": {"claimName": "w"}}]},
        }, config)
        assert ctx.name == "wf"
        assert ctx.uid == "u-1"
        assert ctx.namespace == "ns"
        assert ctx.volumes == (Volume(name="data", source={"persistentVolumeClaim": {"claimName": "c"}}),)
        assert ctx.persistent_volume_claims[0].name == "work"
        assert ctx.config is config

    def test_defaults(self):
        ctx = WorkflowContext.from_dict({"metadata": {"name": "wf"}}, ControllerConfig(executor_image="x"))
        assert ctx.namespace == "default"
        assert ctx.volumes == ()
        assert ctx.persistent_volume_claims == ()


# =============================================================================
# ExecutionUnit TESTS
# =============================================================================


class TestExecutionUnit:
    """Tests for ExecutionUnit."""

    def _unit(self) -> ExecutionUnit:
        return ExecutionUnit(
            name="wf-1",
            namespace="ns",
            labels={"wfpod.io/workflow": "wf"},
            annotations={"wfpod.io/node-name": "wf.a"},
            owner_references=(OwnerReference(api_version="wfpod.io/v1alpha1", kind="Workflow", name="wf", uid="u"),),
            init_containers=(Container(name="init", image="exec"),),
            containers=(Container(name="wait", image="exec"), Container(name="main", image="busybox")),
            volumes=(Volume(name="script", source={"emptyDir": {}}),),
        )

    def test_roles_order(self):
        assert [c.name for c in self._unit().roles] == ["init", "wait", "main"]

    def test_get_role_and_volume(self):
        unit = self._unit()
        assert unit.get_role("main").image == "busybox"
        assert unit.get_role("missing") is None
        assert unit.get_volume("script").source == {"emptyDir": {}}

    def test_manifest_shape(self):
        manifest = self._unit().to_manifest()
        assert manifest["apiVersion"] == "v1"
        assert manifest["kind"] == "Pod"
        assert manifest["metadata"]["name"] == "wf-1"
        assert manifest["metadata"]["ownerReferences"][0]["blockOwnerDeletion"] is True
        assert manifest["spec"]["restartPolicy"] == "Never"
        assert [c["name"] for c in manifest["spec"]["initContainers"]] == ["init"]
        assert manifest["spec"]["volumes"] == [{"name": "script", "emptyDir": {}}]

    def test_manifest_without_init_containers(self):
        unit = ExecutionUnit(name="p", namespace="ns", containers=(Container(name="main", image="x"),))
        assert "initContainers" not in unit.to_manifest()["spec"]
