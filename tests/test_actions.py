"""Tests for turning a resolved stack into Pulumi CLI invocations."""

from argparse import Namespace
from unittest.mock import MagicMock

import pytest

from src.actions.actions import PulumiCLIExecutor, PulumiRunCommand
from src.actions.init_project import ListStacksCommand
from src.select_stack.ci_event import CIEvent, CISystem
from src.select_stack.select_stack import ResolvedStack, StackAction
from src.select_stack.stack_mapping import StackMapping
from src.utils.cmd import BaseCommand


def _args(**overrides):
    values = {"pulumi_args": ["preview"], "comment_on_pr": None, "github_token": None}
    values.update(overrides)
    return Namespace(**values)


def _event(**overrides):
    values = {"system": CISystem.GITHUB, "source_branch": "feature-x", "commit_sha": "abc"}
    values.update(overrides)
    return CIEvent(**values)


def _executor(resolved, mapping=None, event=None, args=None, github_context=None):
    project = MagicMock(pulumi_dir="/work/infra")
    return PulumiCLIExecutor(
        github_context,
        event or _event(),
        args or _args(),
        project,
        mapping if mapping is not None else StackMapping({"master": "prod"}),
        resolved,
    )


@pytest.fixture
def commands(mocker):
    run_command = mocker.patch.object(BaseCommand, "run_command", return_value=None)
    run_with_output = mocker.patch.object(BaseCommand, "run_command_with_output", return_value=(0, "Previewing update"))
    mocker.patch("src.actions.actions.GitHubOutput")
    return run_command, run_with_output


class TestPulumiCLIExecutor:
    def test_select_stack_then_runs_command(self, commands):
        run_command, run_with_output = commands

        exit_code = _executor(ResolvedStack("prod", StackAction.SELECT)).execute()

        assert exit_code == 0
        run_command.assert_called_once_with("pulumi stack select prod")
        run_with_output.assert_called_once_with("pulumi --non-interactive preview")

    def test_select_without_stack_runs_command_only(self, commands):
        run_command, run_with_output = commands

        _executor(ResolvedStack(None, StackAction.SELECT), args=_args(pulumi_args=["up", "-s", "dev"])).execute()

        run_command.assert_not_called()
        run_with_output.assert_called_once_with("pulumi --non-interactive up -s dev")

    def test_create_review_inits_stack(self, commands):
        run_command, run_with_output = commands

        _executor(ResolvedStack("feature-x-review", StackAction.CREATE_REVIEW)).execute()

        run_command.assert_called_once_with("pulumi stack init feature-x-review")
        run_with_output.assert_called_once()

    def test_destroy_review_removes_stack_and_exits(self, commands):
        run_command, run_with_output = commands

        exit_code = _executor(ResolvedStack("feature-x-review", StackAction.DESTROY_REVIEW)).execute()

        assert exit_code == 0
        assert [c.args[0] for c in run_command.call_args_list] == [
            "pulumi --non-interactive destroy -s feature-x-review",
            "pulumi --non-interactive stack rm --yes feature-x-review",
        ]
        run_with_output.assert_not_called()

    def test_skip_runs_nothing(self, commands, capsys):
        run_command, run_with_output = commands

        exit_code = _executor(ResolvedStack(None, StackAction.SKIP), event=_event(event_action="labeled")).execute()

        assert exit_code == 0
        run_command.assert_not_called()
        run_with_output.assert_not_called()
        assert "PR event (labeled)" in capsys.readouterr().out

    def test_none_configured_with_mapping_prints_guidance(self, commands, capsys):
        run_command, run_with_output = commands

        exit_code = _executor(ResolvedStack(None, StackAction.NONE_CONFIGURED)).execute()

        assert exit_code == 0
        run_command.assert_not_called()
        run_with_output.assert_not_called()
        out = capsys.readouterr().out
        assert "No stack configured for branch 'feature-x'" in out
        assert '"feature-x": "<stack-name>"' in out

    def test_none_configured_without_mapping_uses_single_stack(self, commands, mocker):
        run_command, run_with_output = commands
        mocker.patch.object(ListStacksCommand, "execute", return_value=["dev"])

        _executor(ResolvedStack(None, StackAction.NONE_CONFIGURED), mapping=StackMapping(exists=False)).execute()

        run_command.assert_called_once_with("pulumi stack select dev")
        run_with_output.assert_called_once()

    def test_none_configured_without_mapping_and_many_stacks_exits(self, commands, mocker):
        run_command, run_with_output = commands
        mocker.patch.object(ListStacksCommand, "execute", return_value=["dev", "prod"])

        exit_code = _executor(ResolvedStack(None, StackAction.NONE_CONFIGURED),
                              mapping=StackMapping(exists=False)).execute()

        assert exit_code == 0
        run_command.assert_not_called()
        run_with_output.assert_not_called()

    def test_failed_stack_listing_prints_guidance(self, commands, mocker, capsys):
        run_command, run_with_output = commands
        mocker.patch.object(ListStacksCommand, "execute",
                            side_effect=ValueError("command 'pulumi stack ls --json' failed with exit code 255"))

        exit_code = _executor(ResolvedStack(None, StackAction.NONE_CONFIGURED),
                              mapping=StackMapping(exists=False)).execute()

        assert exit_code == 0
        run_command.assert_not_called()
        run_with_output.assert_not_called()
        out = capsys.readouterr().out
        assert "Unable to list stacks" in out
        assert "No stack configured for branch 'feature-x'" in out

    def test_returns_cli_exit_code(self, commands):
        _, run_with_output = commands
        run_with_output.return_value = (255, "error: update failed")

        assert _executor(ResolvedStack("prod", StackAction.SELECT)).execute() == 255

    def test_writes_outputs(self, commands, mocker):
        output_cls = mocker.patch("src.actions.actions.GitHubOutput")

        _executor(ResolvedStack("prod", StackAction.SELECT)).execute()

        output_cls.return_value.output_dict.assert_called_once_with(
            {"stack-name": "prod", "stack-action": "select", "exit-code": "0"})

    def test_comments_on_pull_request(self, commands, mocker):
        commenter_cls = mocker.patch("src.actions.actions.PullRequestCommenter")
        github_context = MagicMock()

        _executor(ResolvedStack("prod", StackAction.SELECT), github_context=github_context).execute()

        commenter_cls.return_value.comment.assert_called_once_with(["preview"], "Previewing update")

    def test_stack_failure_propagates(self, commands):
        run_command, _ = commands
        run_command.side_effect = ValueError("command 'pulumi stack select prod' failed with exit code 255")

        with pytest.raises(ValueError, match="exit code 255"):
            _executor(ResolvedStack("prod", StackAction.SELECT)).execute()

    def test_passes_ci_environment_to_commands(self, mocker):
        run = mocker.patch("src.utils.cmd.subprocess.run")
        run.return_value = MagicMock(returncode=0, stdout="ok")
        mocker.patch("src.actions.actions.GitHubOutput")

        _executor(ResolvedStack("prod", StackAction.SELECT)).execute()

        for call in run.call_args_list:
            assert call.kwargs["cwd"] == "/work/infra"
            assert call.kwargs["env"]["PULUMI_CI_SYSTEM"] == "GitHub"


class TestPulumiRunCommand:
    def test_requires_arguments(self):
        with pytest.raises(ValueError, match="no Pulumi command given"):
            PulumiRunCommand([], ".").run()

    def test_quotes_arguments(self, mocker, capsys):
        run_with_output = mocker.patch.object(BaseCommand, "run_command_with_output", return_value=(0, "done"))

        PulumiRunCommand(["preview", "--message", "two words"], ".").run()

        run_with_output.assert_called_once_with("pulumi --non-interactive preview --message 'two words'")
        out = capsys.readouterr().out
        assert "#### :tropical_drink: `pulumi preview --message two words`" in out
        assert "done" in out


class TestListStacksCommand:
    def test_parses_stack_names(self, mocker):
        mocker.patch.object(BaseCommand, "run_command",
                            return_value='[{"name": "dev", "current": true}, {"name": "prod"}]')
        assert ListStacksCommand(".").execute() == ["dev", "prod"]

    def test_invalid_output_raises(self, mocker):
        mocker.patch.object(BaseCommand, "run_command", return_value="not json")
        with pytest.raises(ValueError, match="stack ls"):
            ListStacksCommand(".").execute()
