"""Launch specifications for HBase role instances.

The command is built so that it stays valid on the node whether the
binaries arrive as an unpacked archive (relative ``lib/<dir>/bin/hbase``)
or are pre-installed (absolute ``<home>/bin/hbase``)::

    lib/hbase-0.98.1/bin/hbase --config $PROPAGATED_CONFDIR regionserver start \\
        1><LOG_DIR>/region-server.txt 2>&1
"""

from __future__ import annotations

import getpass
import os
from collections.abc import Mapping
from pathlib import Path

from loguru import logger

from slipway.constants import (
    ENV_PREFIX,
    LOCAL_TARBALL_INSTALL_SUBDIR,
    LOG_DIR_EXPANSION,
    LOGDIR_ENV,
    PROPAGATED_CONF_DIR_NAME,
    PROPAGATED_CONFDIR_ENV,
    PWD_EXPANSION,
)
from slipway.core.exceptions import ConfigurationError, InternalStateError
from slipway.providers.hbase.keys import (
    ACTION_START,
    ARG_CONFIG,
    BIN_DIR,
    HBASE_LOG_DIR,
    HBASE_ROLES,
    HBASE_SCRIPT,
    ROLE_COMMANDS,
)
from slipway.roles import RoleCatalog
from slipway.spec import ClusterSpecification, LaunchSpec, LocalResource, StagedArtifacts

log = logger.bind(component="launch", provider="hbase")

_ARCHIVE_SUFFIXES = (".tar.gz", ".tar.bz2", ".tar.xz", ".tgz", ".tar", ".zip")


def build_env_map(role_options: Mapping[str, str]) -> dict[str, str]:
    """Environment variables declared as ``env.NAME`` role options."""
    return {
        key[len(ENV_PREFIX) :]: value
        for key, value in role_options.items()
        if key.startswith(ENV_PREFIX) and len(key) > len(ENV_PREFIX)
    }


def default_log_dir() -> str:
    if logdir := os.environ.get(LOGDIR_ENV):
        return logdir
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "unknown"
    return f"/tmp/slipway-{user}"


def conf_resources(conf_dir: Path) -> dict[str, LocalResource]:
    """Every file in the generated configuration directory, under ``propagatedconf/``."""
    if not conf_dir.is_dir():
        raise ConfigurationError(f"Generated configuration directory {conf_dir} does not exist")
    return {
        f"{PROPAGATED_CONF_DIR_NAME}/{path.name}": LocalResource(str(path.absolute()), "file")
        for path in sorted(conf_dir.iterdir())
        if path.is_file()
    }


def archive_root_name(image_path: str, expanded_image_dir: Path | None) -> str:
    """Name of the directory the image unpacks to.

    Taken from the local expanded copy when there is one, otherwise derived
    from the archive file name (``hbase-0.98.1.tar.gz`` -> ``hbase-0.98.1``).
    """
    if expanded_image_dir is not None:
        scripts = sorted(expanded_image_dir.glob(f"*/{BIN_DIR}/{HBASE_SCRIPT}"))
        if not scripts:
            raise ConfigurationError(
                f"No {BIN_DIR}/{HBASE_SCRIPT} found under any directory of {expanded_image_dir}"
            )
        return scripts[0].parent.parent.name

    name = image_path.rstrip("/").rsplit("/", 1)[-1]
    for suffix in _ARCHIVE_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def script_path(spec: ClusterSpecification, staged: StagedArtifacts) -> str:
    if spec.image_path:
        root = archive_root_name(spec.image_path, staged.expanded_image_dir)
        return f"{LOCAL_TARBALL_INSTALL_SUBDIR}/{root}/{BIN_DIR}/{HBASE_SCRIPT}"
    if spec.application_home:
        return str(Path(spec.application_home).expanduser().absolute() / BIN_DIR / HBASE_SCRIPT)
    raise ConfigurationError("Neither an image path nor an application home directory is set")


class LaunchSpecBuilder:
    """Builds LaunchSpecs for the roles of one catalog.

    ``commands`` maps each role to its hbase subcommand and log file name; it
    must cover every role in ``catalog``.
    """

    def __init__(
        self,
        catalog: RoleCatalog = HBASE_ROLES,
        commands: Mapping[str, tuple[str, str]] = ROLE_COMMANDS,
        *,
        log_dir: str | None = None,
    ) -> None:
        self._catalog = catalog
        self._commands = dict(commands)
        self._log_dir = log_dir

    def build(self, role: str, spec: ClusterSpecification, staged: StagedArtifacts) -> LaunchSpec:
        self._catalog.require(role)

        env = build_env_map(spec.options_for(role))
        env[HBASE_LOG_DIR] = self._log_dir or default_log_dir()
        env[PROPAGATED_CONFDIR_ENV] = f"{PWD_EXPANSION}/{PROPAGATED_CONF_DIR_NAME}"

        resources = conf_resources(staged.generated_conf_dir)
        if spec.image_path:
            log.info("using image path {path}", path=spec.image_path)
            resources[LOCAL_TARBALL_INSTALL_SUBDIR] = LocalResource(spec.image_path, "archive")

        command = [script_path(spec, staged), ARG_CONFIG, f"${PROPAGATED_CONFDIR_ENV}"]

        match self._commands.get(role):
            case (subcommand, log_file):
                command += [subcommand, ACTION_START, f"1>{LOG_DIR_EXPANSION}/{log_file}", "2>&1"]
            case _:
                raise InternalStateError(f"Cannot start role {role}: no start command is defined for it")

        launch = LaunchSpec(command=tuple(command), environment=env, local_resources=resources)
        log.debug("Launch command for {role}: {cmd}", role=role, cmd=launch.command_line)
        return launch
