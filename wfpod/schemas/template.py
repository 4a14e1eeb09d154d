"""
Template schema - the declarative description of one workflow step.

A Template is either a container invocation or a script invocation, plus
optional input/output artifacts and sidecars. Dict forms use Kubernetes
camelCase keys so that containers and mounts can be copied into a Pod
manifest as-is, and so the serialized template reads like the workflow YAML
the user wrote.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from wfpod.errors import BadRequestError


def _strs(values: Optional[list[Any]]) -> tuple[str, ...]:
    return tuple(str(v) for v in (values or []))


def _unmodelled(data: dict[str, Any], known: frozenset[str]) -> dict[str, Any]:
    """Keys of a Kubernetes object dict that have no dedicated field."""
    return {k: v for k, v in data.items() if k not in known}


@dataclass(frozen=True)
class VolumeMount:
    """
    A volume mounted into a container at mount_path.

    extra keeps any other VolumeMount field (e.g. mountPropagation) as given.
    """
    name: str
    mount_path: str
    sub_path: Optional[str] = None
    read_only: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = frozenset({"name", "mountPath", "subPath", "readOnly"})

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "mountPath": self.mount_path,
            **({"subPath": self.sub_path} if self.sub_path else {}),
            **({"readOnly": True} if self.read_only else {}),
            **self.extra,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VolumeMount":
        return cls(
            name=data["name"],
            mount_path=data["mountPath"],
            sub_path=data.get("subPath"),
            read_only=data.get("readOnly", False),
            extra=_unmodelled(data, cls._KEYS),
        )


@dataclass(frozen=True)
class Container:
    """
    A container specification.

    Attributes:
        name: Container name (overwritten for the payload role)
        image: Container image
        command: Entrypoint
        args: Arguments to the entrypoint
        working_dir: Optional working directory
        env: Kubernetes EnvVar dicts, passed through untouched
        resources: Kubernetes ResourceRequirements dict
        volume_mounts: Explicit mounts, in declaration order
        image_pull_policy: Optional pull policy
        security_context: Kubernetes SecurityContext dict
        extra: Any other Container field (ports, envFrom, lifecycle, tty,
            ...), passed through untouched
    """
    name: str = ""
    image: str = ""
    command: tuple[str, ...] = ()
    args: tuple[str, ...] = ()
    working_dir: Optional[str] = None
    env: tuple[dict[str, Any], ...] = ()
    resources: dict[str, Any] = field(default_factory=dict)
    volume_mounts: tuple[VolumeMount, ...] = ()
    image_pull_policy: Optional[str] = None
    security_context: Optional[dict[str, Any]] = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = frozenset({
        "name", "image", "command", "args", "workingDir", "env", "resources",
        "volumeMounts", "imagePullPolicy", "securityContext",
    })

    def to_dict(self) -> dict[str, Any]:
        return {
            **({"name": self.name} if self.name else {}),
            "image": self.image,
            **({"command": list(self.command)} if self.command else {}),
            **({"args": list(self.args)} if self.args else {}),
            **({"workingDir": self.working_dir} if self.working_dir else {}),
            **({"env": [dict(e) for e in self.env]} if self.env else {}),
            **({"resources": self.resources} if self.resources else {}),
            **({"volumeMounts": [m.to_dict() for m in self.volume_mounts]}
               if self.volume_mounts else {}),
            **({"imagePullPolicy": self.image_pull_policy} if self.image_pull_policy else {}),
            **({"securityContext": self.security_context}
               if self.security_context is not None else {}),
            **self.extra,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Container":
        return cls(
            name=data.get("name", ""),
            image=data.get("image", ""),
            command=_strs(data.get("command")),
            args=_strs(data.get("args")),
            working_dir=data.get("workingDir"),
            env=tuple(data.get("env", [])),
            resources=data.get("resources", {}),
            volume_mounts=tuple(VolumeMount.from_dict(m) for m in data.get("volumeMounts", [])),
            image_pull_policy=data.get("imagePullPolicy"),
            security_context=data.get("securityContext"),
            extra=_unmodelled(data, cls._KEYS),
        )


@dataclass(frozen=True)
class ContainerInvocation:
    """Run the user's container spec as the main container."""
    container: Container

    def to_dict(self) -> dict[str, Any]:
        return {"container": self.container.to_dict()}


@dataclass(frozen=True)
class ScriptInvocation:
    """Run `source` with `command` inside `image`."""
    image: str
    command: tuple[str, ...] = ()
    source: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "script": {
                "image": self.image,
                **({"command": list(self.command)} if self.command else {}),
                "source": self.source,
            }
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScriptInvocation":
        return cls(
            image=data.get("image", ""),
            command=_strs(data.get("command")),
            source=data.get("source", ""),
        )


Invocation = Union[ContainerInvocation, ScriptInvocation]


@dataclass(frozen=True)
class Parameter:
    """A string parameter, carried through to the executor unchanged."""
    name: str
    value: Optional[str] = None
    default: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            **({"value": self.value} if self.value is not None else {}),
            **({"default": self.default} if self.default is not None else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Parameter":
        return cls(name=data["name"], value=data.get("value"), default=data.get("default"))


@dataclass(frozen=True)
class SecretKeySelector:
    """Reference to one key of a Kubernetes secret."""
    name: str
    key: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "key": self.key}

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["SecretKeySelector"]:
        if not data:
            return None
        return cls(name=data["name"], key=data["key"])


@dataclass(frozen=True)
class S3Artifact:
    """An artifact location in an S3-compatible bucket."""
    bucket: str
    key: str
    endpoint: Optional[str] = None
    region: Optional[str] = None
    insecure: bool = False
    access_key_secret: Optional[SecretKeySelector] = None
    secret_key_secret: Optional[SecretKeySelector] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucket": self.bucket,
            "key": self.key,
            **({"endpoint": self.endpoint} if self.endpoint else {}),
            **({"region": self.region} if self.region else {}),
            **({"insecure": True} if self.insecure else {}),
            **({"accessKeySecret": self.access_key_secret.to_dict()}
               if self.access_key_secret else {}),
            **({"secretKeySecret": self.secret_key_secret.to_dict()}
               if self.secret_key_secret else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "S3Artifact":
        return cls(
            bucket=data["bucket"],
            key=data["key"],
            endpoint=data.get("endpoint"),
            region=data.get("region"),
            insecure=data.get("insecure", False),
            access_key_secret=SecretKeySelector.from_dict(data.get("accessKeySecret")),
            secret_key_secret=SecretKeySelector.from_dict(data.get("secretKeySecret")),
        )


@dataclass(frozen=True)
class GitArtifact:
    """An artifact checked out from a git repository."""
    repo: str
    revision: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"repo": self.repo, **({"revision": self.revision} if self.revision else {})}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GitArtifact":
        return cls(repo=data["repo"], revision=data.get("revision"))


@dataclass(frozen=True)
class HTTPArtifact:
    """An artifact downloaded over HTTP."""
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HTTPArtifact":
        return cls(url=data["url"])


@dataclass(frozen=True)
class Artifact:
    """
    An input or output artifact.

    Attributes:
        name: Artifact name, also used as the sub-path in the artifacts volume
        path: Where the main container sees the artifact
        from_: Reference to another step's output (resolved upstream)
        s3: Explicit S3 location
        git: Explicit git location
        http: Explicit HTTP location
    """
    name: str
    path: Optional[str] = None
    from_: Optional[str] = None
    s3: Optional[S3Artifact] = None
    git: Optional[GitArtifact] = None
    http: Optional[HTTPArtifact] = None

    def __post_init__(self):
        if not self.name:
            raise BadRequestError("artifact name must not be empty")

    @property
    def has_location(self) -> bool:
        """True when the template set an explicit storage location."""
        return self.s3 is not None or self.git is not None or self.http is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            **({"path": self.path} if self.path else {}),
            **({"from": self.from_} if self.from_ else {}),
            **({"s3": self.s3.to_dict()} if self.s3 else {}),
            **({"git": self.git.to_dict()} if self.git else {}),
            **({"http": self.http.to_dict()} if self.http else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Artifact":
        return cls(
            name=data.get("name", ""),
            path=data.get("path"),
            from_=data.get("from"),
            s3=S3Artifact.from_dict(data["s3"]) if data.get("s3") else None,
            git=GitArtifact.from_dict(data["git"]) if data.get("git") else None,
            http=HTTPArtifact.from_dict(data["http"]) if data.get("http") else None,
        )


@dataclass(frozen=True)
class Inputs:
    parameters: tuple[Parameter, ...] = ()
    artifacts: tuple[Artifact, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            **({"parameters": [p.to_dict() for p in self.parameters]} if self.parameters else {}),
            **({"artifacts": [a.to_dict() for a in self.artifacts]} if self.artifacts else {}),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Inputs":
        data = data or {}
        return cls(
            parameters=tuple(Parameter.from_dict(p) for p in data.get("parameters", [])),
            artifacts=tuple(Artifact.from_dict(a) for a in data.get("artifacts", [])),
        )


@dataclass(frozen=True)
class Outputs:
    parameters: tuple[Parameter, ...] = ()
    artifacts: tuple[Artifact, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            **({"parameters": [p.to_dict() for p in self.parameters]} if self.parameters else {}),
            **({"artifacts": [a.to_dict() for a in self.artifacts]} if self.artifacts else {}),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Outputs":
        data = data or {}
        return cls(
            parameters=tuple(Parameter.from_dict(p) for p in data.get("parameters", [])),
            artifacts=tuple(Artifact.from_dict(a) for a in data.get("artifacts", [])),
        )


@dataclass(frozen=True)
class Sidecar:
    """
    An extra container running alongside main.

    mirror_volume_mounts copies every mount of the main container onto
    the sidecar, so both see the same filesystem.
    """
    container: Container
    mirror_volume_mounts: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.container.to_dict(),
            **({"mirrorVolumeMounts": True} if self.mirror_volume_mounts else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Sidecar":
        return cls(
            container=Container.from_dict(
                {k: v for k, v in data.items() if k != "mirrorVolumeMounts"}
            ),
            mirror_volume_mounts=data.get("mirrorVolumeMounts", False),
        )


@dataclass(frozen=True)
class Template:
    """
    One workflow step's execution.

    invocation is None only when an upstream component hands over a
    template that is neither a container nor a script; the compiler
    reports that as an internal error.
    """
    name: str
    invocation: Optional[Invocation] = None
    inputs: Inputs = field(default_factory=Inputs)
    outputs: Outputs = field(default_factory=Outputs)
    sidecars: tuple[Sidecar, ...] = ()

    @property
    def is_script(self) -> bool:
        return isinstance(self.invocation, ScriptInvocation)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON/YAML output."""
        inputs = self.inputs.to_dict()
        outputs = self.outputs.to_dict()
        return {
            "name": self.name,
            **(self.invocation.to_dict() if self.invocation is not None else {}),
            **({"inputs": inputs} if inputs else {}),
            **({"outputs": outputs} if outputs else {}),
            **({"sidecars": [s.to_dict() for s in self.sidecars]} if self.sidecars else {}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Template":
        """Deserialize from dictionary."""
        name = data.get("name", "")
        if data.get("container") and data.get("script"):
            raise BadRequestError(
                f"template '{name}' must specify exactly one of container or script"
            )

        invocation: Optional[Invocation] = None
        if data.get("container"):
            invocation = ContainerInvocation(Container.from_dict(data["container"]))
        elif data.get("script"):
            invocation = ScriptInvocation.from_dict(data["script"])

        return cls(
            name=name,
            invocation=invocation,
            inputs=Inputs.from_dict(data.get("inputs")),
            outputs=Outputs.from_dict(data.get("outputs")),
            sidecars=tuple(Sidecar.from_dict(s) for s in data.get("sidecars", [])),
        )
