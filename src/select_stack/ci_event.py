from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from src.utils.branch import normalize_branch
from src.utils.github_environment_variables import GitHubContext


class CISystem(Enum):
    GITHUB = "GitHub"


PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")


@dataclass(frozen=True)
class CIEvent:
    system: Optional[CISystem]
    source_branch: str = ""
    commit_sha: str = ""
    is_pull_request: bool = False
    event_action: Optional[str] = None
    target_branch: Optional[str] = None

    @staticmethod
    def none() -> "CIEvent":
        return CIEvent(system=None)

    @staticmethod
    def detect(github_context: Optional[GitHubContext], pulumi_ci: Optional[str]) -> "CIEvent":
        """Build the event for this run.

        CI handling is opt-in: without PULUMI_CI, or outside of a GitHub
        workflow, the run is treated as having no CI system at all.
        """
        if not pulumi_ci or github_context is None:
            return CIEvent.none()

        payload = github_context.load_event()
        return CIEvent.from_github(github_context, payload, pulumi_ci)

    @staticmethod
    def from_github(github_context: GitHubContext, payload: Dict[str, Any], pulumi_ci: str) -> "CIEvent":
        is_pull_request = pulumi_ci == "pr" or github_context.event_name in PULL_REQUEST_EVENTS

        source_branch = normalize_branch(github_context.ref)
        target_branch = None
        pull_request = payload.get("pull_request") or {}
        if is_pull_request and pull_request:
            # On pull_request events GITHUB_REF points at refs/pull/<n>/merge.
            source_branch = normalize_branch((pull_request.get("head") or {}).get("ref")) or source_branch
            target_branch = normalize_branch((pull_request.get("base") or {}).get("ref")) or None

        return CIEvent(
            system=CISystem.GITHUB,
            source_branch=source_branch,
            commit_sha=github_context.sha,
            is_pull_request=is_pull_request,
            event_action=payload.get("action"),
            target_branch=target_branch,
        )

    def pulumi_ci_environment(self) -> Dict[str, str]:
        """Variables the Pulumi CLI reads to attribute updates to this CI run."""
        if self.system is None:
            return {}

        return {
            "PULUMI_CI_SYSTEM": self.system.value,
            "PULUMI_CI_BUILD_ID": "",
            "PULUMI_CI_BUILD_TYPE": "",
            "PULUMI_CI_BUILD_URL": "",
            "PULUMI_CI_PULL_REQUEST_SHA": self.commit_sha,
        }
