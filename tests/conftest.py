"""Shared fixtures."""

import json
import subprocess
from typing import Dict, List, Optional

import pytest

from swarm_deploy_agent.config import AgentConfig
from swarm_deploy_agent.executor.base import BaseExecutor, DeploymentResult
from swarm_deploy_agent.models import RegistryCredentials, RuntimeConfig, ServiceTarget, Stage

TOKEN = "s3cret-token"

MAPPING = {
    "production": {
        "defaultNotificationOptions": {"channel": "#deploys"},
        "myorg/app:latest": {"service": "myorg_app_service"},
        "alpha/app:v2": {"service": "alpha_v2"},
    },
    "staging": {
        "myorg/app:staging": {"service": "myorg_app_staging"},
    },
}

AGENT_ENV_VARS = [
    "TOKEN", "TOKEN_FILE", "USERNAME", "USERNAME_FILE", "PASSWORD", "PASSWORD_FILE",
    "CONFIG", "CONFIG_DIR", "CONFIG_FILE", "DOCKER", "GITHUB_TOKEN", "GITHUB_URL",
    "PORT", "HOST", "LOG_LEVEL", "LOG_FORMAT", "LOG_STD_OUT", "LOG_STD_ERR",
]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in AGENT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mapping_dir(tmp_path):
    (tmp_path / "config.json").write_text(json.dumps(MAPPING), encoding="utf-8")
    return tmp_path


@pytest.fixture
def make_config(mapping_dir):
    def _make(**overrides) -> AgentConfig:
        values = {
            "config_dir": str(mapping_dir),
            "config_file": "config.json",
            "docker": "docker",
            "token": TOKEN,
            "username": "deployer",
            "password": "hunter2",
        }
        values.update(overrides)
        return AgentConfig(**values)

    return _make


def make_runtime(username: str = "deployer", password: str = "hunter2") -> RuntimeConfig:
    return RuntimeConfig(
        shared_token=TOKEN,
        credentials=RegistryCredentials(username=username, password=password),
        orchestrator_command="docker",
        environment_selector="production",
        image_to_service={
            "myorg/app:latest": ServiceTarget("myorg_app_service"),
            "alpha/app:v2": ServiceTarget("alpha_v2"),
        },
        default_notification_options={"channel": "#deploys"},
    )


@pytest.fixture
def runtime():
    return make_runtime()


class FakeExecutor(BaseExecutor):
    """Records deploy calls instead of running docker."""

    def __init__(self):
        self.calls: List[Dict] = []

    async def deploy(self, image, target, require_auth, credentials):
        self.calls.append(
            {
                "image": image,
                "target": target,
                "require_auth": require_auth,
                "credentials": credentials,
            }
        )
        return DeploymentResult(status="success", stage=Stage.SUCCEEDED)


@pytest.fixture
def fake_executor():
    return FakeExecutor()


class FakeDocker:
    """Stands in for ``subprocess.run``; fails the steps listed in ``fail``."""

    def __init__(self):
        self.calls: List[Dict] = []
        self.fail: Dict[str, str] = {}

    def __call__(self, cmd, input: Optional[str] = None, capture_output=False, text=False, **kwargs):
        self.calls.append({"cmd": list(cmd), "input": input})
        step = "login" if cmd[1] == "login" else "update"
        if step in self.fail:
            return subprocess.CompletedProcess(cmd, 1, "", self.fail[step])
        return subprocess.CompletedProcess(cmd, 0, f"{step} ok\n", "")

    @property
    def commands(self) -> List[List[str]]:
        return [call["cmd"] for call in self.calls]


@pytest.fixture
def fake_docker(monkeypatch):
    docker = FakeDocker()
    monkeypatch.setattr(subprocess, "run", docker)
    return docker
