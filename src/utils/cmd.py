import os
import subprocess

from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple


class CMDInterface(ABC):
    @abstractmethod
    def execute(self):
        pass


class BaseCommand(ABC):
    def __init__(self, cwd: str = ".", extra_env: Optional[Dict[str, str]] = None):
        self.cwd = cwd
        self.extra_env = extra_env or {}

    @abstractmethod
    def run(self):
        pass

    def _env(self) -> Dict[str, str]:
        return {**os.environ, **self.extra_env}

    def run_command(self, cmd: str, capture_output: bool = False):
        try:
            if capture_output:
                result = subprocess.run(cmd, shell=True, check=True, text=True, stdout=subprocess.PIPE,
                                        stderr=subprocess.PIPE, cwd=self.cwd, env=self._env())
                return result.stdout.strip()
            else:
                subprocess.run(cmd, shell=True, check=True, cwd=self.cwd, env=self._env())
                return None
        except subprocess.CalledProcessError as err:
            raise ValueError(f"command '{cmd}' failed with exit code {err.returncode}")

    def run_command_with_output(self, cmd: str) -> Tuple[int, str]:
        """Run a command with stdout and stderr combined, returning its exit code instead of raising."""
        result = subprocess.run(cmd, shell=True, text=True, stdout=subprocess.PIPE,
                                stderr=subprocess.STDOUT, cwd=self.cwd, env=self._env())
        return result.returncode, result.stdout
