"""Tests for default output artifact locations."""

from wfpod.artifacts import artifact_key, inject_defaults
from wfpod.schemas import Artifact, GitArtifact, S3Artifact


class TestArtifactKey:
    """Tests for artifact_key."""

    def test_with_prefix(self):
        assert artifact_key("store", "my-wf", "my-wf-1", "result") == "store/my-wf/my-wf-1/result"

    def test_without_prefix(self):
        assert artifact_key("", "my-wf", "my-wf-1", "result") == "my-wf/my-wf-1/result"


class TestInjectDefaults:
    """Tests for inject_defaults."""

    def test_fills_in_repository_location(self, s3_controller_config):
        (art,) = inject_defaults(
            (Artifact(name="result", path="/out"),), "my-wf-1", "my-wf", s3_controller_config,
        )
        assert art.s3 == S3Artifact(
            bucket="my-bucket",
            key="store/my-wf/my-wf-1/result",
            endpoint="s3.amazonaws.com",
        )
        assert art.path == "/out"

    def test_explicit_location_untouched(self, s3_controller_config):
        explicit = (
            Artifact(name="a", s3=S3Artifact(bucket="other", key="k")),
            Artifact(name="b", git=GitArtifact(repo="https://example.com/r.git")),
        )
        assert inject_defaults(explicit, "p", "wf", s3_controller_config) == explicit

    def test_no_repository_leaves_artifacts_unchanged(self, controller_config):
        arts = (Artifact(name="result", path="/out"),)
        assert inject_defaults(arts, "p", "wf", controller_config) == arts

    def test_preserves_order(self, s3_controller_config):
        arts = (Artifact(name="z"), Artifact(name="a"))
        names = [a.name for a in inject_defaults(arts, "p", "wf", s3_controller_config)]
        assert names == ["z", "a"]
