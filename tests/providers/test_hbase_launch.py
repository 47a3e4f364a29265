from pathlib import Path

import pytest

from slipway.core.exceptions import BadArgumentsError, ConfigurationError, InternalStateError, UnknownRoleError
from slipway.providers.hbase import HBase
from slipway.providers.hbase.keys import ROLE_COMMANDS
from slipway.providers.hbase.launch import LaunchSpecBuilder, archive_root_name, build_env_map
from slipway.providers.hbase.provider import HBaseProvider
from slipway.roles import Role, RoleCatalog
from slipway.spec import ClusterSpecification, LocalResource, StagedArtifacts

pytestmark = [pytest.mark.unit]

IMAGE = "hdfs:///apps/hbase-0.98.1.tar.gz"


@pytest.fixture
def provider():
    return HBaseProvider(HBase(log_dir="/var/log/hbase"))


@pytest.fixture
def image_spec():
    return ClusterSpecification(
        roles={"master": 1, "worker": 3},
        role_options={"worker": {"env.HBASE_HEAPSIZE": "4096", "jvm.heap": "512M"}},
        image_path=IMAGE,
    )


class TestWorkerLaunch:
    def test_regionserver_command(self, provider, image_spec, generated_conf_dir: Path):
        launch = provider.build_launch_spec("worker", image_spec, StagedArtifacts(generated_conf_dir))

        assert launch.command == (
            "lib/hbase-0.98.1/bin/hbase",
            "--config",
            "$PROPAGATED_CONFDIR",
            "regionserver",
            "start",
            "1><LOG_DIR>/region-server.txt",
            "2>&1",
        )
        assert launch.command_line.startswith("lib/hbase-0.98.1/bin/hbase --config $PROPAGATED_CONFDIR regionserver")

    def test_environment(self, provider, image_spec, generated_conf_dir: Path):
        launch = provider.build_launch_spec("worker", image_spec, StagedArtifacts(generated_conf_dir))

        assert launch.environment == {
            "HBASE_HEAPSIZE": "4096",
            "HBASE_LOG_DIR": "/var/log/hbase",
            "PROPAGATED_CONFDIR": "$PWD/propagatedconf",
        }

    def test_local_resources(self, provider, image_spec, generated_conf_dir: Path):
        launch = provider.build_launch_spec("worker", image_spec, StagedArtifacts(generated_conf_dir))

        assert set(launch.local_resources) == {
            "propagatedconf/hbase-site.xml",
            "propagatedconf/log4j.properties",
            "lib",
        }
        site = launch.local_resources["propagatedconf/hbase-site.xml"]
        assert site == LocalResource(str((generated_conf_dir / "hbase-site.xml").absolute()), "file")
        assert launch.local_resources["lib"] == LocalResource(IMAGE, "archive")

    def test_launch_spec_is_immutable(self, provider, image_spec, generated_conf_dir: Path):
        launch = provider.build_launch_spec("worker", image_spec, StagedArtifacts(generated_conf_dir))
        with pytest.raises(TypeError):
            launch.environment["X"] = "1"  # type: ignore[index]

    def test_fresh_spec_per_request(self, provider, image_spec, generated_conf_dir: Path):
        staged = StagedArtifacts(generated_conf_dir)
        first = provider.build_launch_spec("worker", image_spec, staged)
        second = provider.build_launch_spec("worker", image_spec, staged)
        assert first == second
        assert first is not second


class TestMasterLaunch:
    def test_master_command_and_log(self, provider, image_spec, generated_conf_dir: Path):
        launch = provider.build_launch_spec("master", image_spec, StagedArtifacts(generated_conf_dir))
        assert launch.command[3:] == ("master", "start", "1><LOG_DIR>/master.txt", "2>&1")

    def test_role_options_are_per_role(self, provider, image_spec, generated_conf_dir: Path):
        launch = provider.build_launch_spec("master", image_spec, StagedArtifacts(generated_conf_dir))
        assert "HBASE_HEAPSIZE" not in launch.environment


class TestBinaryLocation:
    def test_expanded_image_dir_names_archive_root(self, provider, generated_conf_dir: Path, tmp_path: Path):
        expanded = tmp_path / "expanded"
        (expanded / "hbase-0.98.1-hadoop2" / "bin").mkdir(parents=True)
        (expanded / "hbase-0.98.1-hadoop2" / "bin" / "hbase").write_text("#!/bin/sh\n")
        spec = ClusterSpecification(roles={"worker": 1}, image_path=IMAGE)

        launch = provider.build_launch_spec("worker", spec, StagedArtifacts(generated_conf_dir, expanded))

        assert launch.command[0] == "lib/hbase-0.98.1-hadoop2/bin/hbase"

    def test_expanded_image_without_script(self, provider, generated_conf_dir: Path, tmp_path: Path):
        expanded = tmp_path / "expanded"
        (expanded / "hbase-0.98.1").mkdir(parents=True)
        spec = ClusterSpecification(roles={"worker": 1}, image_path=IMAGE)

        with pytest.raises(ConfigurationError, match="bin/hbase"):
            provider.build_launch_spec("worker", spec, StagedArtifacts(generated_conf_dir, expanded))

    def test_application_home_is_absolute(self, provider, generated_conf_dir: Path, tmp_path: Path):
        home = tmp_path / "hbase-home"
        spec = ClusterSpecification(roles={"worker": 1}, application_home=str(home))

        launch = provider.build_launch_spec("worker", spec, StagedArtifacts(generated_conf_dir))

        assert launch.command[0] == str(home / "bin" / "hbase")
        assert Path(launch.command[0]).is_absolute()
        assert "lib" not in launch.local_resources

    def test_image_wins_over_application_home(self, provider, generated_conf_dir: Path):
        spec = ClusterSpecification(roles={"worker": 1}, image_path=IMAGE, application_home="/opt/hbase")
        launch = provider.build_launch_spec("worker", spec, StagedArtifacts(generated_conf_dir))
        assert launch.command[0] == "lib/hbase-0.98.1/bin/hbase"

    def test_no_binaries(self, provider, generated_conf_dir: Path):
        spec = ClusterSpecification(roles={"worker": 1})
        with pytest.raises(ConfigurationError):
            provider.build_launch_spec("worker", spec, StagedArtifacts(generated_conf_dir))

    @pytest.mark.parametrize(
        ("image", "root"),
        [
            ("hdfs:///apps/hbase-0.98.1.tar.gz", "hbase-0.98.1"),
            ("/local/hbase-1.0.tgz", "hbase-1.0"),
            ("hbase-2.0.zip", "hbase-2.0"),
            ("hdfs:///apps/hbase-dir/", "hbase-dir"),
        ],
    )
    def test_archive_root_from_name(self, image, root):
        assert archive_root_name(image, None) == root


class TestLaunchErrors:
    def test_unknown_role_checked_first(self, provider, image_spec, tmp_path: Path):
        staged = StagedArtifacts(tmp_path / "does-not-exist")
        with pytest.raises(UnknownRoleError):
            provider.build_launch_spec("gateway", image_spec, staged)

    def test_missing_conf_dir(self, provider, image_spec, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="does not exist"):
            provider.build_launch_spec("worker", image_spec, StagedArtifacts(tmp_path / "nope"))

    def test_role_without_start_command_is_internal(self, image_spec, generated_conf_dir: Path):
        catalog = RoleCatalog([Role("master", id=1), Role("worker", id=2), Role("thrift", id=3)])
        builder = LaunchSpecBuilder(catalog, ROLE_COMMANDS, log_dir="/logs")

        with pytest.raises(InternalStateError, match="thrift") as exc_info:
            builder.build("thrift", image_spec, StagedArtifacts(generated_conf_dir))
        assert not isinstance(exc_info.value, BadArgumentsError)


class TestLogDir:
    def test_logdir_env(self, image_spec, generated_conf_dir: Path, monkeypatch):
        monkeypatch.setenv("LOGDIR", "/data/logs")
        launch = LaunchSpecBuilder().build("worker", image_spec, StagedArtifacts(generated_conf_dir))
        assert launch.environment["HBASE_LOG_DIR"] == "/data/logs"

    def test_fallback_under_tmp(self, image_spec, generated_conf_dir: Path, monkeypatch):
        monkeypatch.delenv("LOGDIR", raising=False)
        launch = LaunchSpecBuilder().build("worker", image_spec, StagedArtifacts(generated_conf_dir))
        assert launch.environment["HBASE_LOG_DIR"].startswith("/tmp/slipway-")


class TestEnvMap:
    def test_only_env_prefixed_keys(self):
        assert build_env_map({"env.A": "1", "envB": "2", "env.": "3", "x.env.C": "4"}) == {"A": "1"}
