import os
import shutil
import subprocess
import requests

from argparse import Namespace
from packaging import version


class PulumiInstaller:
    MIN_VERSION = "v3.0.0"
    INSTALL_DIR = os.path.join("~", ".pulumi", "bin")

    def __init__(self, args: Namespace):
        self.version = args.pulumi_version
        self.url = args.pulumi_download_url
        if not self.version and shutil.which("pulumi"):
            print("Pulumi CLI found on PATH, skipping installation.")
            return
        self.verify_pulumi_version()
        self.install_pulumi()

    def verify_pulumi_version(self):
        print("Verifying Pulumi installation version...")
        if self.version and self.version != "latest":
            if version.parse(self.MIN_VERSION) > version.parse(self.version):
                raise ValueError(f"version {self.version} of Pulumi is not supported. "
                                 f"The version for Pulumi must be at least {self.MIN_VERSION} or greater.")

    def install_pulumi(self):
        print("Installing Pulumi.")
        try:
            response = requests.get(self.url, timeout=60)
            response.raise_for_status()
        except requests.RequestException as err:
            raise ValueError(f"error downloading Pulumi installer script:\n{err}")

        cmd = ["sh", "-s", "--"]
        if self.version and self.version != "latest":
            cmd += ["--version", self.version.lstrip("v")]

        try:
            subprocess.run(cmd, check=True, text=True, input=response.text)
        except subprocess.CalledProcessError as err:
            raise ValueError(f"error installing Pulumi:\n{err}")

        self.add_to_path()

    def add_to_path(self):
        # install.sh only updates PATH for later steps; commands in this process need it now.
        install_dir = os.path.expanduser(self.INSTALL_DIR)
        entries = [entry for entry in os.environ.get("PATH", "").split(os.pathsep) if entry and entry != install_dir]
        os.environ["PATH"] = os.pathsep.join([install_dir, *entries])
        print(f"Pulumi CLI installed in {install_dir}")
