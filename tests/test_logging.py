import json

from terraform_aws.logging import ConsoleLogger, FileLogger, LogLevel, NullLogger
from terraform_aws.resources import aws_s3_bucket, aws_sqs_queue
from terraform_aws.synthesis import TerraformSynthesizer


def read_events(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_file_logger_writes_json_lines(tmp_path):
    path = tmp_path / "events.jsonl"
    logger = FileLogger(str(path))

    logger.info("synthesis.started", "Synthesizing 1 resources", {"resources": 1})
    logger.debug("resource.added", "skipped below min level")
    logger.error("validation.failed", "aws_sqs_queue.jobs")

    events = read_events(path)
    assert [e["event"] for e in events] == ["synthesis.started", "validation.failed"]
    assert events[0]["level"] == "info"
    assert events[0]["data"] == {"resources": 1}
    assert "data" not in events[1]
    assert "timestamp" in events[0]


def test_synthesizer_reports_resources(tmp_path):
    path = tmp_path / "events.jsonl"
    synth = TerraformSynthesizer(event_logger=FileLogger(str(path), min_level=LogLevel.DEBUG))

    aws_sqs_queue(synth, "jobs", {"name": "jobs"})
    aws_s3_bucket(synth, "assets", {
        "bucket": "assets-bucket",
        "public_access_block_configuration": {"block_public_acls": True},
    })
    synth.write(tmp_path / "main.tf.json")

    events = [e["event"] for e in read_events(path)]
    assert events.count("resource.added") == synth.resource_count
    assert "resource.auxiliary" in events
    assert events[-1] == "synthesis.written"


def test_console_logger_respects_min_level(capsys):
    logger = ConsoleLogger(min_level=LogLevel.WARNING, colored=False)
    logger.info("resource.added", "aws_sqs_queue.jobs")
    logger.warning("validation.failed", "aws_sqs_queue.jobs", {"type": "aws_sqs_queue", "name": "jobs"})

    out = capsys.readouterr().out
    assert "aws_sqs_queue.jobs" in out
    assert "type=aws_sqs_queue, name=jobs" in out
    assert out.count("\n") == 1


def test_console_logger_banner(capsys):
    ConsoleLogger(colored=False).info("synthesis.completed", "Synthesized 2 resources", {"count": 2})
    out = capsys.readouterr().out
    assert "Synthesis Completed" in out
    assert "count=2" in out


def test_null_logger_is_default():
    assert isinstance(TerraformSynthesizer().event_logger, NullLogger)
