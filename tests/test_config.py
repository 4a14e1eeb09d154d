"""Tests for configuration loading."""

from pathlib import Path

import pytest

from wfpod.config import WfpodConfig, load_config, load_template, load_workflow
from wfpod.errors import ConfigError
from wfpod.schemas import ContainerInvocation, ControllerConfig

CONFIG_YAML = """
executorImage: wfpod/wfpodexec:v1
executorImagePullPolicy: IfNotPresent
artifactRepository:
  s3:
    bucket: my-bucket
    endpoint: s3.amazonaws.com
    keyPrefix: store
    accessKeySecret:
      name: s3-creds
      key: accessKey
logging:
  level: debug
  format: structured
"""


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text)
    return path


class TestLoadConfig:
    """Tests for load_config and WfpodConfig."""

    def test_full_config(self, tmp_path):
        config = load_config(_write(tmp_path, "config.yaml", CONFIG_YAML))
        controller = config.controller
        assert controller.executor_image == "wfpod/wfpodexec:v1"
        assert controller.executor_image_pull_policy == "IfNotPresent"
        s3 = controller.artifact_repository.s3
        assert s3.bucket == "my-bucket"
        assert s3.key_prefix == "store"
        assert s3.access_key_secret.name == "s3-creds"
        assert s3.secret_key_secret is None
        assert config.get_log_level() == "DEBUG"
        assert config.get_log_format() == "structured"
        assert config.get_log_file_path() is None

    def test_defaults(self, tmp_path):
        config = load_config(_write(tmp_path, "config.yaml", "executorImage: exec:1\n"))
        assert config.controller.artifact_repository.s3 is None
        assert config.get_log_level() == "INFO"
        assert config.get_log_format() == "pretty"

    def test_env_var_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path, "env.yaml", "executorImage: from-env\n")
        monkeypatch.setenv("WFPOD_CONFIG", str(path))
        assert load_config().controller.executor_image == "from-env"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        with pytest.raises(ConfigError, match="empty"):
            load_config(_write(tmp_path, "config.yaml", ""))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(_write(tmp_path, "config.yaml", "executorImage: [unclosed\n"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="Expected a mapping"):
            load_config(_write(tmp_path, "config.yaml", "- a\n- b\n"))

    def test_executor_image_required(self, tmp_path):
        with pytest.raises(ConfigError, match="executorImage is required"):
            load_config(_write(tmp_path, "config.yaml", "logging:\n  level: INFO\n"))

    def test_unknown_log_format(self, tmp_path):
        text = "executorImage: x\nlogging:\n  format: xml\n"
        with pytest.raises(ConfigError, match="Unknown log format"):
            load_config(_write(tmp_path, "config.yaml", text))

    def test_repository_missing_bucket(self, tmp_path):
        text = "executorImage: x\nartifactRepository:\n  s3:\n    endpoint: e\n"
        with pytest.raises(ConfigError, match="bucket"):
            WfpodConfig(_write(tmp_path, "config.yaml", text))


class TestLoadDocuments:
    """Tests for load_template and load_workflow."""

    def test_load_template(self, tmp_path):
        path = _write(tmp_path, "t.yaml", "name: hello\ncontainer:\n  image: busybox\n")
        tmpl = load_template(path)
        assert tmpl.name == "hello"
        assert isinstance(tmpl.invocation, ContainerInvocation)

    def test_load_template_json(self, tmp_path):
        path = _write(tmp_path, "t.json", '{"name": "hello", "script": {"image": "python:3", "source": "x"}}')
        assert load_template(path).is_script

    def test_template_missing_field(self, tmp_path):
        path = _write(tmp_path, "t.yaml", "name: t\ncontainer:\n  volumeMounts:\n    - name: v\n")
        with pytest.raises(ConfigError, match="mountPath"):
            load_template(path)

    def test_load_workflow(self, tmp_path):
        text = "metadata:\n  name: wf\n  uid: u\n  namespace: ns\nspec:\n  volumes:\n    - name: v\n      emptyDir: {}\n"
        controller = ControllerConfig(executor_image="x")
        ctx = load_workflow(_write(tmp_path, "wf.yaml", text), controller)
        assert ctx.name == "wf"
        assert ctx.volumes[0].name == "v"
        assert ctx.config is controller

    def test_workflow_missing_name(self, tmp_path):
        with pytest.raises(ConfigError, match="name"):
            load_workflow(_write(tmp_path, "wf.yaml", "metadata:\n  uid: u\n"), ControllerConfig(executor_image="x"))
