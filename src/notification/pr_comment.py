import sys

from argparse import Namespace
from typing import List, Optional

from github import Github, GithubException

from src.utils.github_environment_variables import GitHubContext


def command_header(pulumi_args: List[str]) -> str:
    return f"#### :tropical_drink: `{' '.join(['pulumi', *pulumi_args])}`"


class PullRequestCommenter:
    def __init__(self, github_context: GitHubContext, args: Namespace):
        self.github_context = github_context
        self.enabled = bool(args.comment_on_pr)
        self.github_token = args.github_token

    def pull_request_number(self) -> Optional[int]:
        # Read from the payload directly: commenting does not depend on PULUMI_CI.
        pull_request = self.github_context.load_event().get("pull_request") or {}
        return pull_request.get("number")

    @staticmethod
    def construct_body(pulumi_args: List[str], output: str) -> str:
        return f"{command_header(pulumi_args)}\n```\n{output}\n```"

    def comment(self, pulumi_args: List[str], output: str) -> Optional[str]:
        """Post the CLI output on the pull request and return the comment URL."""
        if not self.enabled:
            return None

        number = self.pull_request_number()
        if number is None:
            return None

        if not self.github_token or not self.github_token.strip():
            print("ERROR: COMMENT_ON_PR was set, but GITHUB_TOKEN is not set.", file=sys.stderr)
            return None

        print(f"Commenting on PR #{number} in {self.github_context.repository}")
        try:
            client = Github(self.github_token, base_url=self.github_context.api_url)
            issue = client.get_repo(self.github_context.repository).get_issue(number)
            created = issue.create_comment(self.construct_body(pulumi_args, output))
        except GithubException as err:
            print(f"ERROR: failed to comment on PR #{number}: {err}", file=sys.stderr)
            return None

        return created.html_url
