"""
Evidence writer.

Layout:

    <root>/<namespace>/<request_id>/runs/<run_id>/<artifact>.json

Every artifact goes through ``redact`` before serialization, so no raw
value ever reaches disk. Files are written to a temp sibling and moved
into place with ``os.replace``; concurrent writers of the same artifact
are not serialized and the last replace wins.
"""

from __future__ import annotations

import contextlib
import dataclasses
import enum
import json
import logging
import os
import uuid
from datetime import date, datetime
from pathlib import Path, PurePath
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from mova_agent.app.config import get_settings, redact
from mova_agent.app.crypto.signing import SignedPayload, sign_payload, verify_signature
from mova_agent.app.evidence.errors import ArtifactWriteError, EvidenceDirectoryError, EvidenceIOError
from mova_agent.app.observability import structured_log

PathLike = Union[str, "os.PathLike[str]"]

SIGNATURE_SUFFIX = ".sig.json"


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, pydantic models and common scalars into plain JSON types."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, enum.Enum):
        return to_jsonable(value.value)
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def serialize_artifact(data: Any) -> str:
    """Redacted, two-space indented JSON document with trailing newline."""
    return json.dumps(redact(to_jsonable(data)), indent=2, ensure_ascii=False) + "\n"


def signature_filename(filename: str) -> str:
    return str(PurePath(filename).with_suffix(SIGNATURE_SUFFIX))


def _is_safe_segment(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    if value in (".", "..") or "/" in value or "\\" in value or "\x00" in value:
        return False
    return True


def _resolve_inside(evidence_dir: Path, filename: str) -> Path:
    if not filename or PurePath(filename).is_absolute():
        raise ArtifactWriteError("artifact name must be a relative path", filename=filename)
    base = evidence_dir.resolve()
    target = (base / filename).resolve()
    if base not in target.parents:
        raise ArtifactWriteError("artifact path escapes the evidence directory", filename=filename)
    return target


class EvidenceWriter:
    def __init__(self, root: Optional[PathLike] = None, namespace: Optional[str] = None) -> None:
        s = get_settings()
        self.root = Path(root if root is not None else s.artifacts_root)
        self.namespace = namespace or s.evidence_namespace

    def run_directory(self, request_id: str, run_id: str) -> Path:
        return self.root / self.namespace / request_id / "runs" / run_id

    async def create_run_directory(self, request_id: str, run_id: str) -> Path:
        """
        Ensure the run directory exists and return it. Idempotent.

        Raises:
            EvidenceDirectoryError: invalid ids or the directory could not be created
        """
        for label, value in (("request_id", request_id), ("run_id", run_id)):
            if not _is_safe_segment(value):
                raise EvidenceDirectoryError(
                    f"{label} must be a non-empty single path segment",
                    request_id=request_id,
                    run_id=run_id,
                )
        evidence_dir = self.run_directory(request_id, run_id)
        try:
            evidence_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise EvidenceDirectoryError(str(exc), request_id=request_id, run_id=run_id) from exc
        structured_log({"event": "evidence.run_dir", "request_id": request_id, "run_id": run_id})
        return evidence_dir

    async def write_artifact(self, evidence_dir: PathLike, filename: str, data: Any) -> Path:
        """
        Redact ``data`` and write it as JSON to ``evidence_dir/filename``.

        Raises:
            ArtifactWriteError: unserializable data, unsafe filename, or I/O failure
        """
        body = self._serialize(data, filename)
        return self._write_text(Path(evidence_dir), filename, body)

    async def write_signed_artifact(
        self,
        evidence_dir: PathLike,
        filename: str,
        data: Any,
        secret: str,
        timestamp: Optional[str] = None,
    ) -> SignedPayload:
        """Write the artifact plus a ``<stem>.sig.json`` signing the exact bytes written."""
        body = self._serialize(data, filename)
        self._write_text(Path(evidence_dir), filename, body)
        signed = sign_payload(body, secret, timestamp)
        sig_name = signature_filename(filename)
        self._write_text(Path(evidence_dir), sig_name, self._serialize(signed.as_dict(), sig_name))
        return signed

    async def verify_artifact(self, artifact_path: PathLike, secret: str) -> bool:
        path = Path(artifact_path)
        sig_path = path.with_name(signature_filename(path.name))
        try:
            body = path.read_bytes().decode("utf-8")
            signed = SignedPayload.from_dict(json.loads(sig_path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError) as exc:
            raise EvidenceIOError(f"Failed to read signed artifact {path.name}: {exc}") from exc
        return verify_signature(body, secret, signed)

    def _serialize(self, data: Any, filename: str) -> str:
        try:
            return serialize_artifact(data)
        except (TypeError, ValueError) as exc:
            raise ArtifactWriteError(str(exc), filename=filename) from exc

    def _write_text(self, evidence_dir: Path, filename: str, body: str) -> Path:
        target = _resolve_inside(evidence_dir, filename)
        tmp = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(body.encode("utf-8"))
            os.replace(tmp, target)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise ArtifactWriteError(str(exc), filename=filename) from exc
        structured_log(
            {"event": "evidence.artifact", "artifact": filename, "bytes": len(body)},
            level=logging.DEBUG,
        )
        return evidence_dir / filename


__all__ = [
    "EvidenceWriter",
    "SIGNATURE_SUFFIX",
    "serialize_artifact",
    "signature_filename",
    "to_jsonable",
]
