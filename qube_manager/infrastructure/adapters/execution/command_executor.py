"""Executor that runs an operator-provided hook command.

The hook receives the request through environment variables:

    QUBE_ACTION_KEY, QUBE_ACTION, QUBE_VERSION, QUBE_NETWORK,
    QUBE_BINARY_HASH, QUBE_ORIGIN, QUBE_GENESIS_URL, QUBE_REQUIRED_BY

Exit status 0 is success; anything else, a timeout, or a staged binary
whose SHA-256 does not match the signalled hash is a failure.
"""

from __future__ import annotations

import asyncio
import hashlib
import os
from collections.abc import Sequence
from pathlib import Path

import structlog

from qube_manager.domain.errors.execution import (
    BinaryHashMismatchError,
    ExecutionError,
    ExecutionTimeoutError,
)
from qube_manager.domain.models.execution import ExecutionRequest, ExecutionResult

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300.0

# Bytes of hook stderr kept in the failure reason
_STDERR_TAIL = 512

_CHUNK_SIZE = 1024 * 1024


def sha256_file(path: Path) -> str:
    """Return the hex SHA-256 digest of a file."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def request_environment(request: ExecutionRequest) -> dict[str, str]:
    """Environment variables describing a request."""
    env = {
        "QUBE_ACTION_KEY": request.action_key,
        "QUBE_ACTION": request.action_type.value,
        "QUBE_VERSION": request.version,
        "QUBE_NETWORK": request.network_scope,
        "QUBE_BINARY_HASH": request.binary_hash,
        "QUBE_ORIGIN": request.origin_signer_identity,
    }
    if request.genesis_reference:
        env["QUBE_GENESIS_URL"] = request.genesis_reference
    if request.deadline is not None:
        env["QUBE_REQUIRED_BY"] = str(request.deadline)
    return env


class CommandActionExecutor:
    """ActionExecutorProtocol implementation running a hook command.

    Attributes:
        command: argv of the hook.
        timeout_seconds: Time budget for the hook.
        binary_path: Staged binary checked against the signalled hash, if any.
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        binary_path: Path | None = None,
    ) -> None:
        if not command:
            raise ValueError("command must not be empty")
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self.command = list(command)
        self.timeout_seconds = timeout_seconds
        self.binary_path = binary_path

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        log = logger.bind(action_key=request.action_key)
        try:
            if self.binary_path is not None:
                await self._verify_binary(request, self.binary_path)
            await self._run_hook(request)
        except ExecutionError as exc:
            log.warning("hook_failed", error=str(exc))
            return ExecutionResult.failed(str(exc))
        log.info("hook_succeeded")
        return ExecutionResult.succeeded()

    async def _verify_binary(self, request: ExecutionRequest, path: Path) -> None:
        try:
            actual = await asyncio.to_thread(sha256_file, path)
        except OSError as exc:
            raise ExecutionError(
                request.action_key, f"cannot hash {path}: {exc}"
            ) from exc
        if actual.lower() != request.binary_hash.lower():
            raise BinaryHashMismatchError(request.action_key, request.binary_hash, actual)

    async def _run_hook(self, request: ExecutionRequest) -> None:
        env = {**os.environ, **request_environment(request)}
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                env=env,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ExecutionError(
                request.action_key, f"cannot start {self.command[0]}: {exc}"
            ) from exc

        try:
            _, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise ExecutionTimeoutError(request.action_key, self.timeout_seconds) from exc
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            tail = stderr[-_STDERR_TAIL:].decode("utf-8", errors="replace").strip()
            message = f"hook exited with status {process.returncode}"
            if tail:
                message = f"{message}: {tail}"
            raise ExecutionError(request.action_key, message)
