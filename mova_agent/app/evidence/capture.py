from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from mova_agent.app.crypto.signing import SignedPayload
from mova_agent.app.drivers.base import Driver, DriverContext, coerce_context
from mova_agent.app.evidence.writer import EvidenceWriter

INPUT_ARTIFACT = "input.json"
RESULT_ARTIFACT = "result.json"


@dataclass(frozen=True)
class CaptureOutcome:
    evidence_dir: Path
    result: Any
    input_path: Path
    result_path: Path
    signature: Optional[SignedPayload] = None


async def capture_execution(
    driver: Driver,
    driver_input: Any,
    *,
    request_id: str,
    run_id: str,
    context: Optional[DriverContext] = None,
    writer: Optional[EvidenceWriter] = None,
    secret: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> CaptureOutcome:
    """
    Execute one driver call and persist its redacted evidence.

    Configuration and policy errors raised by the driver propagate before
    anything is written. Failed executions are still evidenced, since the
    driver returns them as results. When ``secret`` is given, result.json
    is signed alongside.
    """
    ctx = coerce_context(context)
    result = await driver.execute(driver_input, ctx)

    evidence_writer = writer or EvidenceWriter()
    evidence_dir = await evidence_writer.create_run_directory(request_id, run_id)
    input_path = await evidence_writer.write_artifact(
        evidence_dir,
        INPUT_ARTIFACT,
        {"driver": driver.name, "input": driver_input, "context": ctx},
    )

    signature: Optional[SignedPayload] = None
    if secret:
        signature = await evidence_writer.write_signed_artifact(
            evidence_dir, RESULT_ARTIFACT, result, secret, timestamp
        )
        result_path = evidence_dir / RESULT_ARTIFACT
    else:
        result_path = await evidence_writer.write_artifact(evidence_dir, RESULT_ARTIFACT, result)

    return CaptureOutcome(
        evidence_dir=evidence_dir,
        result=result,
        input_path=input_path,
        result_path=result_path,
        signature=signature,
    )


__all__ = ["CaptureOutcome", "INPUT_ARTIFACT", "RESULT_ARTIFACT", "capture_execution"]
