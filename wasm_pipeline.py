"""The four build steps and the pipeline that runs them in order.

ExtractName -> Compile -> GenerateBindings -> Serve. Each step runs only
after the previous one returned a zero exit code; the first failure stops
the pipeline and its exit code becomes the pipeline's.
"""

import signal
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from wasm_config import BuildConfig, artifact_path
from wasm_manifest import extract_package_name

PREFIX = "[build-web]"

# shell convention for "command not found"
COMMAND_NOT_FOUND = 127


@dataclass
class StepResult:
    name: str
    returncode: int = 0
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class BuildContext:
    config: BuildConfig
    package_name: str = ""
    completed: List[str] = field(default_factory=list)


@dataclass
class Step:
    name: str
    run: Callable[[BuildContext], StepResult]


def run_command(name: str, cmd: List[str], cwd: Optional[Path] = None) -> StepResult:
    """Run an external tool, letting it write straight to the terminal."""
    print(f"{PREFIX} {name}: {' '.join(str(c) for c in cmd)}")
    try:
        subprocess.run([str(c) for c in cmd], cwd=str(cwd) if cwd else None, check=True)
    except subprocess.CalledProcessError as e:
        # a child killed by signal N reports -N; report it the way a shell would
        code = e.returncode if e.returncode > 0 else 128 - e.returncode
        return StepResult(name, code, f"{cmd[0]} exited with status {code}")
    except FileNotFoundError:
        return StepResult(name, COMMAND_NOT_FOUND, f"{cmd[0]}: command not found")
    return StepResult(name)


def extract_step(ctx: BuildContext) -> StepResult:
    config = ctx.config
    ctx.package_name = extract_package_name(config.manifest_path, config.name_key)
    if ctx.package_name:
        detail = f"package {ctx.package_name}"
    else:
        detail = f"no {config.name_key!r} in {config.manifest_path}"
    return StepResult("extract-name", 0, detail)


def compile_step(ctx: BuildContext) -> StepResult:
    config = ctx.config
    cmd = [config.cargo, "build", "--target", config.target]
    if config.profile == "release":
        cmd.append("--release")
    elif config.profile != "dev":
        cmd.extend(["--profile", config.profile])
    return run_command("compile", cmd, cwd=config.project_dir)


def snapshot(directory: Path) -> Dict[str, Tuple[int, int]]:
    """Modification time and size of every file directly inside ``directory``."""
    if not directory.is_dir():
        return {}
    files = {}
    for p in directory.iterdir():
        if p.is_file():
            st = p.stat()
            files[p.name] = (st.st_mtime_ns, st.st_size)
    return files


def bindgen_step(ctx: BuildContext) -> StepResult:
    config = ctx.config
    wasm = artifact_path(config, ctx.package_name)
    if not wasm.is_file():
        return StepResult("generate-bindings", 1, f"compiled artifact not found: {wasm}")

    cmd = [
        config.wasm_bindgen,
        "--out-dir", config.output_dir,
        "--target", config.bindgen_target,
        wasm,
    ]
    out = config.output_dir
    before = snapshot(out)
    result = run_command("generate-bindings", cmd, cwd=config.project_dir)
    if not result.ok:
        return result

    after = snapshot(out)
    if not any(before.get(name) != stat for name, stat in after.items()):
        return StepResult("generate-bindings", 1, f"no files generated in {out}")
    return result


def server_command(config: BuildConfig) -> List[str]:
    if config.builtin_server:
        return [
            sys.executable, str(Path(__file__).with_name("wasm_serve.py")),
            config.output_dir,
            "--host", config.host,
            "--port", str(config.port),
        ]
    return [config.server, "--addr", f"{config.host}:{config.port}", config.output_dir]


def serve_step(ctx: BuildContext) -> StepResult:
    config = ctx.config
    print(f"{PREFIX} serving {config.output_dir} at http://{config.host}:{config.port}/ (Ctrl-C to stop)")
    try:
        result = run_command("serve", server_command(config), cwd=config.project_dir)
    except KeyboardInterrupt:
        return StepResult("serve", 0, "interrupted")
    if result.returncode == 128 + signal.SIGINT:
        return StepResult("serve", 0, "interrupted")
    return result


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = list(steps)

    def run(self, ctx: BuildContext) -> int:
        for step in self.steps:
            print(f"{PREFIX} ==> {step.name}")
            result = step.run(ctx)
            if not result.ok:
                print(f"{PREFIX} {step.name} failed: {result.detail}", file=sys.stderr)
                return result.returncode
            ctx.completed.append(step.name)
            print(f"{PREFIX} {step.name}: {result.detail or 'ok'}")
        return 0


def default_pipeline(serve: bool = True) -> Pipeline:
    steps = [
        Step("extract-name", extract_step),
        Step("compile", compile_step),
        Step("generate-bindings", bindgen_step),
    ]
    if serve:
        steps.append(Step("serve", serve_step))
    return Pipeline(steps)
