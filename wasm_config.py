"""Configuration for the build-and-serve workflow.

Values can be overridden via environment variables:
- CARGO_HOME
- CARGO_TARGET_DIR
- BUILD_WEB_OUT_DIR
- BUILD_WEB_PORT

The environment is read once, in ``BuildConfig.from_env``.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from wasm_manifest import artifact_stem


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class BuildConfig:
    project_dir: Path = Path(".")
    manifest_name: str = "Cargo.toml"
    name_key: str = "name"

    target: str = "wasm32-unknown-unknown"
    profile: str = "release"
    toolchain_home: Path = Path("~/.cargo").expanduser()
    target_dir: Optional[Path] = None

    out_dir: Path = Path("wasm")
    bindgen_target: str = "web"
    artifact_name: str = ""

    cargo: str = "cargo"
    wasm_bindgen: str = "wasm-bindgen"
    server: str = "basic-http-server"
    host: str = "127.0.0.1"
    port: int = 4000
    builtin_server: bool = False

    @property
    def manifest_path(self) -> Path:
        return self.project_dir / self.manifest_name

    @property
    def output_dir(self) -> Path:
        return self.project_dir / self.out_dir

    @property
    def profile_dir(self) -> str:
        # cargo writes the dev profile to debug/, every other profile to its own name
        return "debug" if self.profile == "dev" else self.profile

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "BuildConfig":
        env = os.environ if environ is None else environ

        values = {}
        if env.get("CARGO_HOME"):
            values["toolchain_home"] = Path(env["CARGO_HOME"])
        if env.get("CARGO_TARGET_DIR"):
            values["target_dir"] = Path(env["CARGO_TARGET_DIR"])
        if env.get("BUILD_WEB_OUT_DIR"):
            values["out_dir"] = Path(env["BUILD_WEB_OUT_DIR"])
        if env.get("BUILD_WEB_PORT"):
            values["port"] = env["BUILD_WEB_PORT"]

        values.update({k: v for k, v in overrides.items() if v is not None})
        values["port"] = _parse_port(values.get("port", cls.port))
        values["project_dir"] = Path(values.get("project_dir", cls.project_dir)).resolve()
        return cls(**values)


def _parse_port(value) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"port must be an integer, got {value!r}")
    if not 0 < port < 65536:
        raise ConfigError(f"port out of range: {port}")
    return port


def artifact_path(config: BuildConfig, package_name: str) -> Path:
    """Where cargo leaves the compiled module for this config and crate."""
    if config.target_dir is not None:
        # cargo resolves a relative CARGO_TARGET_DIR against the project
        base = config.project_dir / config.target_dir
    else:
        base = config.toolchain_home / "target"
    stem = config.artifact_name or artifact_stem(package_name)
    return base / config.target / config.profile_dir / f"{stem}.wasm"
