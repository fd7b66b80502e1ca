import asyncio
import json

import pytest

from mova_agent.app.drivers import (
    DriverContext,
    PolicyViolation,
    ProcessFailure,
    ProcessOutput,
    RestrictedShellDriver,
    ShellInput,
)
from mova_agent.app.evidence import (
    INPUT_ARTIFACT,
    RESULT_ARTIFACT,
    EvidenceWriter,
    capture_execution,
)


async def _echo_runner(command, args, *, timeout_ms, windows_hide):
    return ProcessOutput(stdout=f"ran {command} {' '.join(args)} token=abc123", stderr="")


async def _failing_runner(command, args, *, timeout_ms, windows_hide):
    raise ProcessFailure("exit status 2", code=2, stdout="", stderr="password=hunter2 rejected")


def test_capture_writes_redacted_input_and_result(tmp_path):
    writer = EvidenceWriter(root=tmp_path)
    outcome = asyncio.run(
        capture_execution(
            RestrictedShellDriver(runner=_echo_runner),
            ShellInput(command="echo", args=("hello",)),
            request_id="req-1",
            run_id="run-1",
            context=DriverContext(allowlist=("echo",), bindings={"api_key": "k-123"}),
            writer=writer,
        )
    )

    assert outcome.evidence_dir == tmp_path / "mova_agent" / "req-1" / "runs" / "run-1"
    assert outcome.input_path.name == INPUT_ARTIFACT
    assert outcome.result_path.name == RESULT_ARTIFACT
    assert outcome.signature is None
    assert outcome.result.exit_code == 0

    recorded_input = json.loads(outcome.input_path.read_text())
    assert recorded_input["driver"] == "restricted_shell"
    assert recorded_input["input"]["command"] == "echo"
    assert recorded_input["input"]["args"] == ["hello"]
    assert recorded_input["context"]["allowlist"] == ["echo"]
    assert recorded_input["context"]["bindings"] == {"api_key": "[redacted]"}

    recorded_result = json.loads(outcome.result_path.read_text())
    assert recorded_result["exit_code"] == 0
    assert recorded_result["stdout"] == "ran echo hello token=[redacted]"
    assert "abc123" not in outcome.result_path.read_text()


def test_failed_execution_is_still_evidenced(tmp_path):
    outcome = asyncio.run(
        capture_execution(
            RestrictedShellDriver(runner=_failing_runner),
            {"command": "git", "args": ["push"]},
            request_id="req-2",
            run_id="run-1",
            writer=EvidenceWriter(root=tmp_path),
        )
    )
    recorded = json.loads(outcome.result_path.read_text())
    assert recorded["exit_code"] == 2
    assert recorded["stderr"] == "password=[redacted] rejected"


def test_policy_violation_writes_nothing(tmp_path):
    with pytest.raises(PolicyViolation):
        asyncio.run(
            capture_execution(
                RestrictedShellDriver(runner=_echo_runner),
                {"command": "rm", "args": ["-rf", "/"]},
                request_id="req-3",
                run_id="run-1",
                context={"allowlist": ["echo"]},
                writer=EvidenceWriter(root=tmp_path),
            )
        )
    assert list(tmp_path.iterdir()) == []


def test_signed_capture_can_be_verified(tmp_path):
    writer = EvidenceWriter(root=tmp_path)

    async def _go():
        outcome = await capture_execution(
            RestrictedShellDriver(runner=_echo_runner),
            {"command": "echo", "args": ["hi"]},
            request_id="req-4",
            run_id="run-1",
            writer=writer,
            secret="evidence-secret",
            timestamp="2024-01-01T00:00:00.000Z",
        )
        verified = await writer.verify_artifact(outcome.result_path, "evidence-secret")
        return outcome, verified

    outcome, verified = asyncio.run(_go())
    assert outcome.signature is not None
    assert outcome.signature.timestamp == "2024-01-01T00:00:00.000Z"
    assert (outcome.evidence_dir / "result.sig.json").exists()
    assert verified is True


def test_artifact_names_exported_from_package():
    assert INPUT_ARTIFACT == "input.json"
    assert RESULT_ARTIFACT == "result.json"
