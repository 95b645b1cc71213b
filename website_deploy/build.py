"""Pre-upload steps: the environment bundle and the user's build hook."""

import json
import logging
import os
import subprocess
from typing import Tuple

logger = logging.getLogger(__name__)

ENV_FILE = "env.js"


class BuildError(RuntimeError):
    def __init__(self, command: str, stderr: str):
        self.command = command
        self.stderr = stderr
        super().__init__(
            f'Failed building website via "{command}" due to the following error: "{stderr}"'
        )


class BuildRunner:
    def run(self, command: str, cwd: str) -> Tuple[str, str, int]:
        """Run a shell command in cwd and return (stdout, stderr, exit code)."""
        result = subprocess.run(
            command, shell=True, cwd=cwd, capture_output=True, text=True, errors="replace"
        )
        return result.stdout, result.stderr, result.returncode


def run_hook(runner: BuildRunner, command: str, cwd: str) -> str:
    logger.debug(f"Running {command} in {cwd}.")
    try:
        stdout, stderr, returncode = runner.run(command, cwd)
    except OSError as e:
        raise BuildError(command, str(e)) from e
    if returncode != 0:
        logger.error(stderr)
        raise BuildError(command, stderr)
    return stdout


def render_env_script(env: dict) -> str:
    lines = ["window.env = {};"]
    for key, value in env.items():
        lines.append(f"window.env.{key} = {json.dumps(value, separators=(',', ':'))};")
    return "\n".join(lines) + "\n"


def write_env_bundle(env: dict, root: str) -> str:
    """Write env as browser globals to <root>/env.js and return the file path."""
    path = os.path.join(root, ENV_FILE)
    with open(path, "w") as f:
        f.write(render_env_script(env))
    logger.debug(f"Website env written to file {path}.")
    return path
