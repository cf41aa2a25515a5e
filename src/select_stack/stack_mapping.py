import json
import os

from types import MappingProxyType
from typing import Dict, Mapping, Optional

CI_MAPPING_FILE = os.path.join(".pulumi", "ci.json")


class StackMapping:
    """Branch name to stack name table read from .pulumi/ci.json."""

    def __init__(self, stacks: Optional[Dict[str, Optional[str]]] = None, exists: bool = True):
        self._stacks: Mapping[str, Optional[str]] = MappingProxyType(dict(stacks or {}))
        self.exists = exists

    @staticmethod
    def load(root: str) -> "StackMapping":
        path = os.path.join(root, CI_MAPPING_FILE)
        if not os.path.exists(path):
            return StackMapping(exists=False)

        try:
            with open(path) as mapping_file:
                data = json.load(mapping_file)
        except json.JSONDecodeError as err:
            raise ValueError(f"failed to parse stack mapping {path}: {err}")

        if not isinstance(data, dict):
            raise ValueError(f"invalid stack mapping {path}: expected a JSON object of branch to stack names")

        for branch, stack in data.items():
            if stack is not None and not isinstance(stack, str):
                raise ValueError(f"invalid stack name for branch '{branch}' in {path}: {stack!r}")

        return StackMapping(data)

    def lookup(self, branch: Optional[str]) -> Optional[str]:
        if not branch:
            return None
        return self._stacks.get(branch) or None

    def __contains__(self, branch: str) -> bool:
        return self.lookup(branch) is not None

    def __len__(self) -> int:
        return len(self._stacks)

    def __repr__(self):
        return f"StackMapping(stacks={dict(self._stacks)})"
