import json

import pytest

from terraform_aws.errors import DuplicateResourceError
from terraform_aws.logging import Logger
from terraform_aws.synthesis import TerraformSynthesizer, compact, interpolation


class RecordingLogger(Logger):
    def __init__(self):
        self.events = []

    def log(self, level, event, message="", data=None):
        self.events.append((level.value, event, data))


def test_interpolation_format():
    assert interpolation("aws_sqs_queue", "jobs", "arn") == "${aws_sqs_queue.jobs.arn}"
    assert TerraformSynthesizer.ref("aws_kms_key", "main", "key_id") == "${aws_kms_key.main.key_id}"


def test_compact_drops_none_recursively():
    value = {"a": 1, "b": None, "c": {"d": None, "e": [1, None, {"f": None}]}}
    assert compact(value) == {"a": 1, "c": {"e": [1, {}]}}


def test_resource_is_stored_without_none_values(synth):
    body = synth.resource("aws_sqs_queue", "jobs", {"name": "jobs", "policy": None})
    assert body == {"name": "jobs"}
    assert synth.has_resource("aws_sqs_queue", "jobs")
    assert synth.get_resource("aws_sqs_queue", "jobs") == {"name": "jobs"}


def test_resource_key_order_preserved(synth):
    synth.resource("aws_sqs_queue", "jobs", {"z": 1, "a": 2, "m": 3})
    assert list(synth.get_resource("aws_sqs_queue", "jobs")) == ["z", "a", "m"]


def test_duplicate_resource_raises(synth):
    synth.resource("aws_sqs_queue", "jobs", {"name": "a"})
    with pytest.raises(DuplicateResourceError, match=r"aws_sqs_queue\.jobs is already defined"):
        synth.resource("aws_sqs_queue", "jobs", {"name": "b"})


def test_same_name_different_type_allowed(synth):
    synth.resource("aws_sqs_queue", "main", {})
    synth.resource("aws_sns_topic", "main", {})
    assert synth.resource_count == 2
    assert synth.resource_addresses() == ["aws_sqs_queue.main", "aws_sns_topic.main"]


def test_synthesis_omits_empty_sections(synth):
    assert synth.synthesis() == {}
    synth.resource("aws_sqs_queue", "jobs", {"name": "jobs"})
    assert set(synth.synthesis()) == {"resource"}


def test_synthesis_full_document(synth):
    synth.terraform_block({"aws": {"source": "hashicorp/aws", "version": "~> 5.0"}})
    synth.provider("aws", region="eu-west-1", default_tags=None)
    synth.resource("aws_sqs_queue", "jobs", {"name": "jobs"})
    synth.output("queue_arn", "${aws_sqs_queue.jobs.arn}", description="Queue ARN", sensitive=True)

    document = synth.synthesis()
    assert document["terraform"]["required_providers"]["aws"]["version"] == "~> 5.0"
    assert document["provider"] == {"aws": {"region": "eu-west-1"}}
    assert document["output"]["queue_arn"] == {
        "value": "${aws_sqs_queue.jobs.arn}",
        "description": "Queue ARN",
        "sensitive": True,
    }


def test_to_json_and_write(synth, tmp_path):
    synth.resource("aws_sqs_queue", "jobs", {"name": "jobs"})
    assert json.loads(synth.to_json()) == synth.synthesis()

    path = synth.write(tmp_path / "out" / "main.tf.json")
    assert path.exists()
    assert json.loads(path.read_text())["resource"]["aws_sqs_queue"]["jobs"] == {"name": "jobs"}


def test_reset_clears_document(synth):
    synth.resource("aws_sqs_queue", "jobs", {})
    synth.output("x", 1)
    synth.reset()
    assert synth.synthesis() == {}
    assert synth.resource_count == 0


def test_events_are_logged():
    recorder = RecordingLogger()
    synth = TerraformSynthesizer(event_logger=recorder)
    synth.resource("aws_sqs_queue", "jobs", {})
    synth.output("arn", "x")

    events = [event for _, event, _ in recorder.events]
    assert events == ["resource.added", "output.added"]
    assert recorder.events[0][2] == {"type": "aws_sqs_queue", "name": "jobs"}
