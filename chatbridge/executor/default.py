"""Default executor: ping, help and read-only kubectl commands."""

import shlex
import subprocess

from loguru import logger

from chatbridge.config.schema import Settings
from chatbridge.executor.base import Executor, ExecutorFactory, Platform

HELP_TEXT = """chatbridge executes commands against your cluster.

Usage:
  @bot ping                      check the bot is alive
  @bot help                      show this message
  @bot <verb> [args]             run 'kubectl <verb> [args]'
  @bot kubectl <verb> [args]     same as above

Options:
  --cluster-name <name>          only answer from the named cluster

Allowed verbs: {verbs}"""

UNSUPPORTED = "Command not supported. Please run 'help' to see supported commands."
NAMESPACE_FLAGS = ("-n", "--namespace", "-A", "--all-namespaces")


def _split_cluster_filter(args: list[str]) -> tuple[list[str], str | None]:
    """Remove ``--cluster-name`` from *args* and return (rest, cluster)."""
    rest: list[str] = []
    cluster = None
    it = iter(args)
    for arg in it:
        if arg == "--cluster-name":
            cluster = next(it, "")
        elif arg.startswith("--cluster-name="):
            cluster = arg.split("=", 1)[1]
        else:
            rest.append(arg)
    return rest, cluster


def _has_namespace(args: list[str]) -> bool:
    return any(a in NAMESPACE_FLAGS or a.startswith(("--namespace=", "-n=")) for a in args)


class DefaultExecutor(Executor):
    """Executes one request according to the kubectl settings."""

    def __init__(self, settings: Settings, platform: Platform, authorized: bool, request: str):
        self.settings = settings
        self.platform = platform
        self.authorized = authorized
        self.request = request

    @property
    def cluster(self) -> str:
        return self.settings.cluster_name or "unknown"

    def execute(self) -> str:
        try:
            args = shlex.split(self.request)
        except ValueError as e:
            return f"Invalid command: {e}"

        args, target_cluster = _split_cluster_filter(args)
        if target_cluster is not None and target_cluster != self.settings.cluster_name:
            # Addressed to another cluster's bot in the same channel
            logger.debug(f"Skipping request for cluster {target_cluster!r}")
            return ""

        if not args:
            return self._help()

        verb, *rest = args
        verb = verb.lower()
        if verb == "ping":
            return f"pong from cluster '{self.cluster}'"
        if verb == "help":
            return self._help()
        if verb == "kubectl":
            if not rest:
                return UNSUPPORTED
            verb, *rest = rest
            verb = verb.lower()
        if verb in {c.lower() for c in self.settings.kubectl.commands}:
            return self._run_kubectl([verb, *rest])
        return UNSUPPORTED

    def _help(self) -> str:
        return HELP_TEXT.format(verbs=", ".join(self.settings.kubectl.commands))

    def _run_kubectl(self, args: list[str]) -> str:
        kubectl = self.settings.kubectl
        if not kubectl.enabled:
            return (
                "Sorry, the admin hasn't given me the permission to execute kubectl "
                f"commands on cluster '{self.cluster}'."
            )
        if kubectl.restrict_access and not self.authorized:
            return (
                "Sorry, this channel is not authorized to execute kubectl "
                f"commands on cluster '{self.cluster}'."
            )

        if not _has_namespace(args):
            args = [*args, "-n", kubectl.default_namespace]

        logger.info(f"Running kubectl {' '.join(args)} (origin={self.platform.value})")
        try:
            result = subprocess.run(
                ["kubectl", *args],
                capture_output=True, text=True,
                timeout=kubectl.command_timeout,
            )
        except FileNotFoundError:
            return "kubectl is not installed on the bot host."
        except subprocess.TimeoutExpired:
            return f"Command timed out after {kubectl.command_timeout}s."

        output = (result.stdout + result.stderr).strip()
        if not output:
            output = f"Command exited with code {result.returncode} and no output."
        return f"Cluster: {self.cluster}\n{output}"


class DefaultExecutorFactory(ExecutorFactory):
    """Creates DefaultExecutor instances sharing one Settings value."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def new_default(self, platform: Platform, authorized: bool, request: str) -> Executor:
        return DefaultExecutor(self.settings, platform, authorized, request)
