import json
import os

from argparse import Namespace
from typing import Dict, List, Optional

from src.select_stack.stack_mapping import StackMapping
from ..utils.cmd import BaseCommand, CMDInterface


class ListStacksCommand(BaseCommand, CMDInterface):
    def __init__(self, cwd: str, extra_env: Optional[Dict[str, str]] = None):
        super().__init__(cwd, extra_env)

    def execute(self) -> List[str]:
        return self.run()

    def run(self) -> List[str]:
        output = self.run_command("pulumi stack ls --json", True)
        try:
            stacks = json.loads(output or "[]")
        except json.JSONDecodeError as err:
            raise ValueError(f"failed to parse 'pulumi stack ls' output: {err}")
        return [stack["name"] for stack in stacks]


class ProjectInitializer:
    def __init__(self, args: Namespace, root: Optional[str] = None):
        print("Initialize Pulumi project.")
        # The stack mapping lives at the repository root, not inside PULUMI_ROOT.
        self.root = os.path.abspath(root or os.getcwd())
        self.pulumi_dir = self.configure_pulumi_root(args.pulumi_root)

    def configure_pulumi_root(self, pulumi_root: Optional[str]) -> str:
        if not pulumi_root:
            return self.root

        pulumi_dir = os.path.join(self.root, pulumi_root)
        if not os.path.isdir(pulumi_dir):
            raise ValueError(f"PULUMI_ROOT directory '{pulumi_root}' does not exist")
        print(f"Using Pulumi project directory: {pulumi_root}")
        return pulumi_dir

    def load_stack_mapping(self) -> StackMapping:
        mapping = StackMapping.load(self.root)
        if mapping.exists:
            print(f"Loaded stack mapping for {len(mapping)} branch(es)")
        return mapping
