from types import MappingProxyType

import pytest
from pydantic import ValidationError

from conftest import make_runtime
from swarm_deploy_agent.models import ImageRef, RegistryCredentials, ServiceTarget, WebhookPayload


def test_canonical_form():
    image = ImageRef(repo_name="myorg/app", tag="latest")
    assert image.canonical == "myorg/app:latest"
    assert str(image) == "myorg/app:latest"


def test_similar_tags_are_distinct_keys():
    a = ImageRef("alpha/app", "v2")
    b = ImageRef("alpha/app", "v2.0")
    assert a != b
    assert a.canonical != b.canonical
    assert len({a, b}) == 2


def test_equality_follows_canonical_string():
    assert ImageRef("alpha/app", "v2") == ImageRef("alpha/app", "v2")
    assert hash(ImageRef("alpha/app", "v2")) == hash(ImageRef.parse("alpha/app:v2"))


@pytest.mark.parametrize(
    "reference, repo_name, tag",
    [
        ("myorg/app:latest", "myorg/app", "latest"),
        ("registry.local:5000/app:v1", "registry.local:5000/app", "v1"),
        ("nginx:1.25", "nginx", "1.25"),
    ],
)
def test_parse(reference, repo_name, tag):
    image = ImageRef.parse(reference)
    assert (image.repo_name, image.tag) == (repo_name, tag)


@pytest.mark.parametrize("reference", ["myorg/app", "registry.local:5000/app", ":latest", "app:"])
def test_parse_rejects_references_without_tag(reference):
    with pytest.raises(ValueError):
        ImageRef.parse(reference)


def test_registry_auth_requires_both_credentials():
    assert make_runtime().require_registry_auth is True
    assert make_runtime(password="").require_registry_auth is False
    assert make_runtime(username="").require_registry_auth is False
    assert make_runtime(username="", password="").require_registry_auth is False


def test_runtime_config_is_read_only():
    runtime = make_runtime()
    assert isinstance(runtime.image_to_service, MappingProxyType)
    with pytest.raises(TypeError):
        runtime.image_to_service["evil/app:latest"] = ServiceTarget("evil")
    with pytest.raises(AttributeError):
        runtime.shared_token = "other"


def test_runtime_lookup_is_exact():
    runtime = make_runtime()
    assert runtime.lookup(ImageRef("alpha/app", "v2")) == ServiceTarget("alpha_v2")
    assert runtime.lookup(ImageRef("alpha/app", "v2.0")) is None
    assert runtime.lookup(ImageRef("alpha/ap", "v2")) is None


def test_secrets_hidden_from_repr():
    runtime = make_runtime(password="hunter2")
    assert "hunter2" not in repr(runtime)
    assert "s3cret" not in repr(runtime)
    assert "hunter2" not in repr(RegistryCredentials("u", "hunter2"))


def test_payload_reads_docker_hub_fields_and_ignores_the_rest():
    payload = WebhookPayload.model_validate(
        {
            "callback_url": "https://registry.hub.docker.com/u/myorg/app/hook/abc/",
            "push_data": {"tag": "latest", "pusher": "someone", "images": None},
            "repository": {"repo_name": "myorg/app", "status": "Active"},
        }
    )
    assert payload.image_ref() == ImageRef("myorg/app", "latest")


def test_payload_accepts_camel_case_names():
    payload = WebhookPayload.model_validate(
        {"repository": {"repoName": "myorg/app"}, "pushData": {"tag": "v1"}}
    )
    assert payload.image_ref().canonical == "myorg/app:v1"


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"repository": {"repo_name": "myorg/app"}},
        {"repository": {}, "push_data": {"tag": "v1"}},
        {"repository": {"repo_name": ""}, "push_data": {"tag": "v1"}},
        {"repository": "myorg/app", "push_data": {"tag": "v1"}},
    ],
)
def test_payload_rejects_missing_fields(body):
    with pytest.raises(ValidationError):
        WebhookPayload.model_validate(body)
