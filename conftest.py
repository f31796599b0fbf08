"""Shared fixtures: a scratch crate and a stand-in for subprocess.run."""

import subprocess
from pathlib import Path

import pytest

import wasm_pipeline
from wasm_config import BuildConfig, artifact_path


class FakeTools:
    """Records every command and plays back per-tool exit codes and side effects."""

    def __init__(self):
        self.calls = []
        self.cwds = []
        self.returncodes = {}
        self.actions = {}

    def __call__(self, cmd, cwd=None, check=False, **kwargs):
        self.calls.append(list(cmd))
        self.cwds.append(cwd)
        tool = cmd[0]
        action = self.actions.get(tool)
        if action is not None:
            action(cmd)
        code = self.returncodes.get(tool, 0)
        if check and code:
            raise subprocess.CalledProcessError(code, cmd)
        return subprocess.CompletedProcess(cmd, code)

    @property
    def tools(self):
        return [c[0] for c in self.calls]


def emit_glue(cmd):
    out = Path(cmd[cmd.index("--out-dir") + 1])
    out.mkdir(parents=True, exist_ok=True)
    (out / "bubble.js").write_text("export default function init() {}\n")
    (out / "bubble_bg.wasm").write_bytes(b"\0asm\x01\0\0\0")


def interrupt(cmd):
    raise KeyboardInterrupt


@pytest.fixture
def crate(tmp_path):
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "bubble"\nversion = "0.1.0"\n')
    return tmp_path


@pytest.fixture
def config(crate):
    return BuildConfig.from_env({"CARGO_TARGET_DIR": "target"}, project_dir=crate)


@pytest.fixture
def tools(monkeypatch, config):
    fake = FakeTools()

    def build_artifact(cmd):
        wasm = artifact_path(config, "bubble")
        wasm.parent.mkdir(parents=True, exist_ok=True)
        wasm.write_bytes(b"\0asm\x01\0\0\0")

    fake.actions["cargo"] = build_artifact
    fake.actions["wasm-bindgen"] = emit_glue
    fake.actions["basic-http-server"] = interrupt
    monkeypatch.setattr(wasm_pipeline.subprocess, "run", fake)
    return fake
