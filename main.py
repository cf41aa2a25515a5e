#!/usr/bin/env python3

import sys

from src.actions.actions import PulumiCLIExecutor
from src.actions.init_project import ProjectInitializer
from src.input_output.input import PulumiActionArgumentParser
from src.select_stack.ci_event import CIEvent
from src.select_stack.select_stack import StackAction, StackResolver
from src.utils.github_environment_variables import GitHubContext
from src.utils.install_pulumi import PulumiInstaller


def main(argv=None) -> int:
    """Parse command-line arguments"""
    args = PulumiActionArgumentParser().parse_args(argv)

    """Retrieve GitHub Action environment variables"""
    github_context = GitHubContext.from_env()
    event = CIEvent.detect(github_context, args.pulumi_ci)
    if event.system is not None:
        print(f"Detected CI system: {event.system.value}")
        print(f"Current branch: {event.source_branch}")

    """Locate the Pulumi project and the branch to stack mapping"""
    project = ProjectInitializer(args)
    mapping = project.load_stack_mapping()

    """Determine the Pulumi stack for this run"""
    resolved = StackResolver().resolve(event, mapping, bool(args.pulumi_review_stacks))
    print(f"Stack action: {resolved.action.value}, stack: {resolved.stack_name or '-'}")

    """Install the Pulumi CLI"""
    if resolved.action != StackAction.SKIP:
        PulumiInstaller(args)

    """Execute the Pulumi command"""
    return PulumiCLIExecutor(github_context, event, args, project, mapping, resolved).execute()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(1)
