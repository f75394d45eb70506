import json

import pytest

from terraform_aws.synthesis import TerraformSynthesizer

ACCOUNT_ID = "123456789012"


@pytest.fixture
def synth():
    return TerraformSynthesizer()


@pytest.fixture
def clean_env(monkeypatch):
    for var in (
        "TF_AWS_REGION",
        "TF_AWS_PROVIDER_VERSION",
        "TF_AWS_OUTPUT",
        "TF_AWS_LOG_LEVEL",
        "TF_AWS_DEFAULT_TAGS",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def write_stack(tmp_path):
    def _write(data, filename="stack.json"):
        path = tmp_path / filename
        path.write_text(data if isinstance(data, str) else json.dumps(data))
        return path
    return _write


def resource_body(synth, resource_type, name):
    return synth.synthesis()["resource"][resource_type][name]
