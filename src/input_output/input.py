import os
import argparse


class ArgumentParser:
    class EnvDefault(argparse.Action):
        def __init__(self, envvar, required=True, default=None, **kwargs):
            if envvar:
                if envvar in os.environ:
                    default = os.environ.get(envvar, default)
            if required and default:
                required = False
            super().__init__(default=default, required=required, metavar=envvar, **kwargs)

        def __call__(self, parser, namespace, values, option_string=None):
            setattr(namespace, self.dest, values)

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            description="Select a Pulumi stack for the current CI run and execute the Pulumi CLI.")
        self.setup_arguments()

    def setup_arguments(self):
        self.parser.add_argument("--comment-on-pr",
                                 action=self.EnvDefault, envvar="COMMENT_ON_PR",
                                 type=str, required=False)

        self.parser.add_argument("--github-token",
                                 action=self.EnvDefault, envvar="GITHUB_TOKEN",
                                 type=str, required=False)

        self.parser.add_argument("--pulumi-ci",
                                 action=self.EnvDefault, envvar="PULUMI_CI",
                                 type=str, required=False)

        self.parser.add_argument("--pulumi-download-url",
                                 action=self.EnvDefault, envvar="PULUMI_DOWNLOAD_URL",
                                 type=str, default="https://get.pulumi.com/install.sh")

        self.parser.add_argument("--pulumi-review-stacks",
                                 action=self.EnvDefault, envvar="PULUMI_REVIEW_STACKS",
                                 type=str, required=False)

        self.parser.add_argument("--pulumi-root",
                                 action=self.EnvDefault, envvar="PULUMI_ROOT",
                                 type=str, required=False)

        self.parser.add_argument("--pulumi-version",
                                 action=self.EnvDefault, envvar="PULUMI_VERSION",
                                 type=str, required=False)

        self.parser.add_argument("pulumi_args", nargs=argparse.REMAINDER,
                                 help="arguments passed through to the Pulumi CLI")

    def parse_args(self, argv=None):
        return self.parser.parse_args(argv)


class PulumiActionArgumentParser(ArgumentParser):
    def parse_args(self, argv=None):
        """Parse action flags, keeping every other argument for the Pulumi CLI in its original order."""
        args, unknown = self.parser.parse_known_args(argv)
        pulumi_args = unknown + args.pulumi_args
        if pulumi_args and pulumi_args[0] == "--":
            pulumi_args = pulumi_args[1:]
        args.pulumi_args = pulumi_args
        return args
