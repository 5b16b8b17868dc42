"""Argument building and process invocation for the qodo executable."""

from __future__ import annotations

import asyncio
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from qodo_bridge.config import QodoConfig
from qodo_bridge.errors import InvocationError

DEFAULT_EXECUTABLE = "qodo"
CHAIN_SEPARATOR = " > "
UNKNOWN_VERSION = "unknown"
NOT_INSTALLED = "not installed"

log = logger.bind(service="qodo-cli")


@dataclass
class InvocationOptions:
    """Per-call overrides. Every field is optional and passed through unchecked."""

    model: str | None = None
    agent_file: str | None = None
    mcp_file: str | None = None
    dirs: list[str] = field(default_factory=list)
    tools: list[str] = field(default_factory=list)
    permissions: str | None = None
    plan: bool = False
    act: bool = False
    no_builtin: bool = False
    debug: bool = False
    silent: bool = False
    yes: bool = False
    set_values: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class InvocationResult:
    """Outcome of one child process."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None
    spawn_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.spawn_error is None and self.exit_code == 0

    @property
    def error(self) -> str | None:
        if self.ok:
            return None
        if self.spawn_error is not None:
            return f"Failed to execute Qodo CLI: {self.spawn_error}"
        detail = self.stderr.strip() or self.stdout
        return f"Qodo CLI exited with code {self.exit_code}: {detail}"

    def unwrap(self) -> str:
        if not self.ok:
            raise InvocationError(self.error or "")
        return self.stdout


@dataclass(frozen=True)
class CliStatus:
    installed: bool
    version: str
    authenticated: bool
    available_models: list[str] = field(default_factory=list)


def parse_model_list(output: str) -> list[str]:
    """One model per line; blank lines and ``#`` comments are dropped."""

    models: list[str] = []
    for line in output.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            models.append(stripped)
    return models


def run_sync(executable: str, *args: str) -> subprocess.CompletedProcess[str] | None:
    """Run a short query command; None when the process could not start."""

    try:
        return subprocess.run(  # noqa: S603
            [executable, *args],
            capture_output=True,
            text=True,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        log.debug("cli.query_failed args={} error={}", list(args), exc)
        return None


class QodoCli:
    """Builds argument vectors from layered configuration and runs the executable."""

    def __init__(self, config: QodoConfig, *, executable: str = DEFAULT_EXECUTABLE) -> None:
        self._config = config
        self._executable = executable

    @property
    def config(self) -> QodoConfig:
        return self._config

    @property
    def executable(self) -> str:
        return self._executable

    def build_args(self, options: InvocationOptions | None = None) -> list[str]:
        """Translate options into flags. Per-call values win over stored ones."""

        options = options or InvocationOptions()
        config = self._config
        args: list[str] = []

        model = options.model or config.default_model
        if model:
            args.extend(["-m", model])

        if options.agent_file:
            args.extend(["--agent-file", options.agent_file])
        if options.mcp_file:
            args.extend(["--mcp-file", options.mcp_file])

        for directory in options.dirs:
            args.extend(["--dir", directory])

        tools = options.tools or config.tools
        if tools:
            args.extend(["-t", ",".join(tools)])

        permissions = options.permissions or config.permissions
        if permissions:
            args.extend(["--permissions", permissions])

        # Mode flags are additive: either side turns them on.
        if options.plan or config.plan:
            args.append("--plan")
        if options.act or config.act:
            args.append("--act")
        if options.no_builtin or config.no_builtin:
            args.append("--no-builtin")
        if options.debug or config.debug:
            args.append("-d")

        if options.silent:
            args.append("-q")
        if options.yes:
            args.append("-y")

        for key, value in options.set_values.items():
            args.extend(["--set", f"{key}={value}"])

        return args

    def execute_argv(self, prompt: str, options: InvocationOptions | None = None) -> list[str]:
        return [*self.build_args(options), prompt]

    def run_agent_argv(
        self,
        name: str,
        extra_instructions: str | None = None,
        options: InvocationOptions | None = None,
    ) -> list[str]:
        argv = ["run", name]
        if extra_instructions:
            argv.append(extra_instructions)
        argv.extend(self.build_args(options))
        return argv

    def chat_argv(self, options: InvocationOptions | None = None) -> list[str]:
        return ["chat", *self.build_args(options)]

    def self_review_argv(self, options: InvocationOptions | None = None) -> list[str]:
        # --ci keeps the review headless; it is never optional.
        return ["self-review", "--ci", *self.build_args(options)]

    def chain_command(self, agents: Sequence[str], options: InvocationOptions | None = None) -> str:
        """Shell command line for ``chain``; the agent list must reach the CLI as one argument."""

        chain = CHAIN_SEPARATOR.join(agents)
        tokens = [shlex.quote(self._executable), "chain", shlex.quote(chain)]
        tokens.extend(shlex.quote(arg) for arg in self.build_args(options))
        return " ".join(tokens)

    async def execute(self, prompt: str, options: InvocationOptions | None = None) -> InvocationResult:
        return await self._spawn(self.execute_argv(prompt, options))

    async def execute_prompt(self, prompt: str, options: InvocationOptions | None = None) -> InvocationResult:
        return await self.execute(prompt, options)

    async def run_agent(
        self,
        name: str,
        extra_instructions: str | None = None,
        options: InvocationOptions | None = None,
    ) -> InvocationResult:
        return await self._spawn(self.run_agent_argv(name, extra_instructions, options))

    async def chat(self, options: InvocationOptions | None = None) -> InvocationResult:
        return await self._spawn(self.chat_argv(options))

    async def self_review(self, options: InvocationOptions | None = None) -> InvocationResult:
        return await self._spawn(self.self_review_argv(options))

    async def chain(self, agents: Sequence[str], options: InvocationOptions | None = None) -> InvocationResult:
        command = self.chain_command(agents, options)
        log.debug("cli.spawn_shell command={}", command)
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            return InvocationResult(spawn_error=str(exc))
        return await self._collect(process)

    def get_version(self) -> str:
        completed = run_sync(self._executable, "--version")
        if completed is None or completed.returncode != 0:
            return UNKNOWN_VERSION
        return completed.stdout.strip()

    def is_installed(self) -> bool:
        completed = run_sync(self._executable, "--version")
        return completed is not None and completed.returncode == 0

    def get_models(self) -> list[str]:
        completed = run_sync(self._executable, "models")
        if completed is None or completed.returncode != 0:
            return []
        return parse_model_list(completed.stdout)

    def is_authenticated(self) -> bool:
        completed = run_sync(self._executable, "key", "list")
        return completed is not None and completed.returncode == 0

    def get_status(self) -> CliStatus:
        installed = self.is_installed()
        return CliStatus(
            installed=installed,
            version=self.get_version() if installed else NOT_INSTALLED,
            authenticated=self.is_authenticated(),
            available_models=self.get_models() if installed else [],
        )

    async def _spawn(self, argv: list[str]) -> InvocationResult:
        log.debug("cli.spawn executable={} argv={}", self._executable, argv)
        try:
            process = await asyncio.create_subprocess_exec(
                self._executable,
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            log.error("cli.spawn_failed executable={} error={}", self._executable, exc)
            return InvocationResult(spawn_error=str(exc))
        return await self._collect(process)

    @staticmethod
    async def _collect(process: asyncio.subprocess.Process) -> InvocationResult:
        # No deadline: a hung child blocks the caller until it exits.
        stdout, stderr = await process.communicate()
        result = InvocationResult(
            stdout=stdout.decode("utf-8", errors="replace").strip(),
            stderr=stderr.decode("utf-8", errors="replace"),
            exit_code=process.returncode,
        )
        if not result.ok:
            log.warning("cli.exit_nonzero code={}", result.exit_code)
        return result
