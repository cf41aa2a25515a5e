from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.select_stack.ci_event import CIEvent
from src.select_stack.stack_mapping import StackMapping


class StackAction(Enum):
    SELECT = "select"
    CREATE_REVIEW = "create_review"
    DESTROY_REVIEW = "destroy_review"
    NONE_CONFIGURED = "none_configured"
    SKIP = "skip"


@dataclass(frozen=True)
class ResolvedStack:
    stack_name: Optional[str]
    action: StackAction


class StackResolverInterface(ABC):
    @abstractmethod
    def resolve(self, event: Optional[CIEvent], mapping: StackMapping, review_stacks_enabled: bool) -> ResolvedStack:
        pass


class StackResolver(StackResolverInterface):
    # PR events that change code; everything else (labels, assignments, reviews) is ignored.
    PREVIEW_PR_ACTIONS = ("opened", "edited", "synchronize", "reopened")
    CREATE_REVIEW_PR_ACTIONS = ("opened", "reopened")
    DESTROY_REVIEW_PR_ACTIONS = ("closed",)

    REVIEW_STACK_SUFFIX = "-review"

    def resolve(self, event: Optional[CIEvent], mapping: StackMapping, review_stacks_enabled: bool) -> ResolvedStack:
        if event is None or event.system is None:
            return ResolvedStack(None, StackAction.SELECT)

        resolved = self._resolve_stack(event, mapping, review_stacks_enabled)

        if event.is_pull_request and event.event_action not in self.PREVIEW_PR_ACTIONS:
            if resolved.action != StackAction.DESTROY_REVIEW:
                return ResolvedStack(None, StackAction.SKIP)
        return resolved

    def _resolve_stack(self, event: CIEvent, mapping: StackMapping, review_stacks_enabled: bool) -> ResolvedStack:
        source_is_mapped = event.source_branch in mapping

        if review_stacks_enabled and event.is_pull_request and not source_is_mapped:
            if event.event_action in self.CREATE_REVIEW_PR_ACTIONS:
                return ResolvedStack(self.review_stack_name(event.source_branch), StackAction.CREATE_REVIEW)
            if event.event_action in self.DESTROY_REVIEW_PR_ACTIONS:
                return ResolvedStack(self.review_stack_name(event.source_branch), StackAction.DESTROY_REVIEW)

        stack_name = mapping.lookup(self.effective_branch(event, mapping))
        if stack_name:
            return ResolvedStack(stack_name, StackAction.SELECT)
        return ResolvedStack(None, StackAction.NONE_CONFIGURED)

    @staticmethod
    def effective_branch(event: CIEvent, mapping: StackMapping) -> str:
        """Branch the stack lookup runs against.

        A pull request from an unmapped topic branch resolves against the
        branch it merges into; push events always use their own branch.
        """
        if event.is_pull_request and event.source_branch not in mapping and event.target_branch:
            return event.target_branch
        return event.source_branch

    @classmethod
    def review_stack_name(cls, branch: str) -> str:
        return f"{branch}{cls.REVIEW_STACK_SUFFIX}"
