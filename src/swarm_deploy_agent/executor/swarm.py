"""Docker Swarm executor: ``docker login`` then ``docker service update``."""

import asyncio
import subprocess
from dataclasses import dataclass
from typing import List, Optional

import structlog

from ..models import DeploymentAttempt, ImageRef, RegistryCredentials, ServiceTarget, Stage
from .base import BaseExecutor, DeploymentResult

logger = structlog.get_logger()


@dataclass
class CommandResult:
    """Exit status and captured output of one docker invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class SwarmExecutor(BaseExecutor):
    """Docker Swarm service executor."""

    def __init__(self, docker_command: str, log_std_out: bool = True, log_std_err: bool = True):
        """Initialize Swarm executor.

        Args:
            docker_command: Path to the docker CLI
            log_std_out: Log stdout captured from docker
            log_std_err: Log stderr captured from docker
        """
        self.docker_command = docker_command
        self.log_std_out = log_std_out
        self.log_std_err = log_std_err
        logger.info("swarm.executor_initialized", docker=docker_command)

    async def deploy(
        self,
        image: ImageRef,
        target: ServiceTarget,
        require_auth: bool,
        credentials: RegistryCredentials,
    ) -> DeploymentResult:
        """Log in (when required) and force-update the service to ``image``.

        The update only runs once the login has succeeded. Either step
        failing ends the attempt; nothing is retried.

        Args:
            image: Image to deploy
            target: Service to update
            require_auth: Log in and pass --with-registry-auth
            credentials: Docker Hub credentials

        Returns:
            DeploymentResult
        """
        attempt = DeploymentAttempt(image=image, target=target)

        if require_auth:
            attempt.stage = Stage.AUTHENTICATING
            login = await self._run(
                "login",
                [self.docker_command, "login", "-u", credentials.username, "--password-stdin"],
                stdin=credentials.password,
            )
            if not login.ok:
                return self._failed(attempt, "Docker login failed", login)

        attempt.stage = Stage.UPDATING
        cmd = self.update_command(image, target, require_auth)
        logger.info(
            "swarm.update.starting",
            image=image.canonical,
            service=target.name,
            cmd=" ".join(cmd),
        )
        update = await self._run("update", cmd)
        if not update.ok:
            return self._failed(attempt, f"Failed to deploy {image} to {target}", update)

        attempt.stage = Stage.SUCCEEDED
        logger.info(
            "swarm.update.success",
            image=image.canonical,
            service=target.name,
            message=f"Deployed {image} to {target} successfully and restarted the service",
        )
        return DeploymentResult(
            status="success",
            stage=attempt.stage,
            message=f"Deployed {image} to {target}",
        )

    def update_command(self, image: ImageRef, target: ServiceTarget, with_registry_auth: bool) -> List[str]:
        """Build the ``docker service update`` argv."""
        cmd = [self.docker_command, "service", "update", "--force"]
        if with_registry_auth:
            cmd.append("--with-registry-auth")
        cmd.extend([f"--image={image.canonical}", target.name])
        return cmd

    async def _run(self, step: str, cmd: List[str], stdin: Optional[str] = None) -> CommandResult:
        logger.debug("swarm.command", step=step)
        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            return CommandResult(returncode=-1, stderr=str(e))

        command_result = CommandResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
        self._log_output(step, command_result)
        return command_result

    def _log_output(self, step: str, result: CommandResult):
        out = result.stdout.strip()
        err = result.stderr.strip()
        if out and self.log_std_out:
            logger.info("swarm.stdout", step=step, stdout=out)
        # Failures always carry stderr in swarm.deploy.failed, whatever LOG_STD_ERR says
        if err and self.log_std_err and result.ok:
            logger.warning("swarm.stderr", step=step, stderr=err)

    def _failed(self, attempt: DeploymentAttempt, message: str, result: CommandResult) -> DeploymentResult:
        step = attempt.stage.value
        attempt.stage = Stage.FAILED
        logger.error(
            "swarm.deploy.failed",
            step=step,
            image=attempt.image.canonical,
            service=attempt.target.name,
            returncode=result.returncode,
            stderr=result.stderr.strip(),
            message=message,
        )
        return DeploymentResult(
            status="failed",
            stage=attempt.stage,
            message=message,
            error=result.stderr.strip() or f"exit status {result.returncode}",
        )
