import shlex

from argparse import Namespace
from typing import Dict, List, Optional, Tuple

from src.actions.init_project import ListStacksCommand, ProjectInitializer
from src.input_output.output import GitHubOutput
from src.notification.pr_comment import PullRequestCommenter, command_header
from src.select_stack.ci_event import CIEvent
from src.select_stack.select_stack import ResolvedStack, StackAction, StackResolver
from src.select_stack.stack_mapping import CI_MAPPING_FILE, StackMapping
from src.utils.cmd import BaseCommand, CMDInterface
from src.utils.github_environment_variables import GitHubContext


class StackSelectCommand(BaseCommand):
    def __init__(self, stack_name: str, cwd: str, extra_env: Optional[Dict[str, str]] = None):
        super().__init__(cwd, extra_env)
        self.stack_name = stack_name

    def run(self):
        print(f"Selecting Pulumi Stack ({self.stack_name})")
        self.run_command(f"pulumi stack select {shlex.quote(self.stack_name)}")


class StackInitCommand(BaseCommand):
    def __init__(self, stack_name: str, cwd: str, extra_env: Optional[Dict[str, str]] = None):
        super().__init__(cwd, extra_env)
        self.stack_name = stack_name

    def run(self):
        print(f"Creating review stack ({self.stack_name})")
        self.run_command(f"pulumi stack init {shlex.quote(self.stack_name)}")


class StackDestroyCommand(BaseCommand):
    def __init__(self, stack_name: str, cwd: str, extra_env: Optional[Dict[str, str]] = None):
        super().__init__(cwd, extra_env)
        self.stack_name = stack_name

    def run(self):
        stack = shlex.quote(self.stack_name)
        print(f"Destroying review stack ({self.stack_name})")
        self.run_command(f"pulumi --non-interactive destroy -s {stack}")
        self.run_command(f"pulumi --non-interactive stack rm --yes {stack}")
        print(f"Review stack {self.stack_name} has been destroyed and removed")


class PulumiRunCommand(BaseCommand):
    def __init__(self, pulumi_args: List[str], cwd: str, extra_env: Optional[Dict[str, str]] = None):
        super().__init__(cwd, extra_env)
        self.pulumi_args = pulumi_args

    def run(self) -> Tuple[int, str]:
        if not self.pulumi_args:
            raise ValueError("no Pulumi command given, e.g. 'preview' or 'up'")

        cmd = f"pulumi --non-interactive {shlex.join(self.pulumi_args)}"
        print(f"Running Pulumi CLI ({cmd}) ....")
        exit_code, output = self.run_command_with_output(cmd)

        print(command_header(self.pulumi_args))
        print(output)
        return exit_code, output


class PulumiCLIExecutor(CMDInterface):
    def __init__(self, github_context: Optional[GitHubContext], event: CIEvent, args: Namespace,
                 project: ProjectInitializer, mapping: StackMapping, resolved: ResolvedStack):
        self.github_context = github_context
        self.event = event
        self.args = args
        self.project = project
        self.mapping = mapping
        self.resolved = resolved
        self.cwd = project.pulumi_dir
        self.extra_env = event.pulumi_ci_environment()

    def execute(self) -> int:
        """Run the stack operation for the resolved action, then the Pulumi command itself."""
        stack_name = self.resolved.stack_name
        data_output = {
            "stack-name":   stack_name,
            "stack-action": self.resolved.action.value,
        }

        match self.resolved.action:
            case StackAction.SKIP:
                print(f"PR event ({self.event.event_action}) contains no changes and does not warrant a Pulumi Preview")
                print("Skipping Pulumi action altogether...")
                GitHubOutput().output_dict(data_output)
                return 0
            case StackAction.DESTROY_REVIEW:
                StackDestroyCommand(stack_name, self.cwd, self.extra_env).run()
                GitHubOutput().output_dict(data_output)
                return 0
            case StackAction.CREATE_REVIEW:
                StackInitCommand(stack_name, self.cwd, self.extra_env).run()
            case StackAction.SELECT:
                if stack_name:
                    StackSelectCommand(stack_name, self.cwd, self.extra_env).run()
            case StackAction.NONE_CONFIGURED:
                stack_name = self.single_stack_fallback()
                if not stack_name:
                    self.print_unconfigured_branch()
                    GitHubOutput().output_dict(data_output)
                    return 0
                data_output["stack-name"] = stack_name
                StackSelectCommand(stack_name, self.cwd, self.extra_env).run()
            case _:
                raise ValueError(f"unknown stack action: {self.resolved.action}")

        exit_code, output = PulumiRunCommand(self.args.pulumi_args, self.cwd, self.extra_env).run()

        if self.github_context is not None:
            PullRequestCommenter(self.github_context, self.args).comment(self.args.pulumi_args, output)

        data_output["exit-code"] = str(exit_code)
        GitHubOutput().output_dict(data_output)
        return exit_code

    def single_stack_fallback(self) -> Optional[str]:
        """Without a mapping file, a project with exactly one stack uses that stack."""
        if self.mapping.exists:
            return None

        try:
            stacks = ListStacksCommand(self.cwd, self.extra_env).execute()
        except ValueError as err:
            print(f"Unable to list stacks, skipping single stack lookup: {err}")
            return None

        if len(stacks) == 1:
            print(f"No {CI_MAPPING_FILE} found, using the only stack in the project")
            return stacks[0]
        return None

    def print_unconfigured_branch(self):
        branch = StackResolver.effective_branch(self.event, self.mapping)
        print(f"No stack configured for branch '{branch}'")
        print("")
        print("To configure this branch, please")
        print("\t1) Run 'pulumi stack init <stack-name>'")
        print("\t2) Associate the stack with the branch by adding")
        print("\t\t{")
        print(f"\t\t\t\"{branch}\": \"<stack-name>\"")
        print("\t\t}")
        print(f"\tto your {CI_MAPPING_FILE} file")
        print("")
        print("For now, exiting cleanly without doing anything...")
