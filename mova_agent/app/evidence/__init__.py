from .errors import ArtifactWriteError, EvidenceDirectoryError, EvidenceIOError
from .writer import EvidenceWriter, serialize_artifact, signature_filename, to_jsonable
from .capture import INPUT_ARTIFACT, RESULT_ARTIFACT, CaptureOutcome, capture_execution

__all__ = [
    "ArtifactWriteError",
    "CaptureOutcome",
    "EvidenceDirectoryError",
    "EvidenceIOError",
    "EvidenceWriter",
    "INPUT_ARTIFACT",
    "RESULT_ARTIFACT",
    "capture_execution",
    "serialize_artifact",
    "signature_filename",
    "to_jsonable",
]
