# GITHUB_API_URL=https://api.github.com
# GITHUB_EVENT_NAME=pull_request
# GITHUB_EVENT_PATH=/github/workflow/event.json
# GITHUB_REF=refs/heads/feature-branch-1
# GITHUB_REPOSITORY=octocat/Hello-World
# GITHUB_SHA=ffac537e6cbbf934b08745a378932722df287a53
# GITHUB_WORKFLOW=Pulumi

import json
import os

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class GitHubContext:
    workflow: str
    event_name: str
    event_path: str
    ref: str
    sha: str
    repository: str
    api_url: str

    @staticmethod
    def from_env() -> Optional["GitHubContext"]:
        """Return the GitHub Actions context, or None outside of a GitHub workflow."""
        if not os.getenv("GITHUB_WORKFLOW"):
            return None

        return GitHubContext(
            workflow=os.getenv("GITHUB_WORKFLOW"),
            event_name=os.getenv("GITHUB_EVENT_NAME", ""),
            event_path=os.getenv("GITHUB_EVENT_PATH", ""),
            ref=os.getenv("GITHUB_REF", ""),
            sha=os.getenv("GITHUB_SHA", ""),
            repository=os.getenv("GITHUB_REPOSITORY", ""),
            api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
        )

    def load_event(self) -> Dict[str, Any]:
        """Parse the webhook payload that triggered the workflow."""
        if not self.event_path or not os.path.exists(self.event_path):
            return {}

        try:
            with open(self.event_path) as event_file:
                payload = json.load(event_file)
        except json.JSONDecodeError as err:
            raise ValueError(f"failed to parse GitHub event payload {self.event_path}: {err}")

        if not isinstance(payload, dict):
            raise ValueError(f"invalid GitHub event payload {self.event_path}: expected a JSON object")
        return payload
