from typing import Optional


class EvidenceIOError(Exception):
    """Raised when evidence cannot be persisted. Never swallowed."""


class EvidenceDirectoryError(EvidenceIOError):
    def __init__(self, message: str, *, request_id: Optional[str], run_id: Optional[str]) -> None:
        super().__init__(f"Failed to create evidence directory (request_id={request_id}, run_id={run_id}): {message}")
        self.request_id = request_id
        self.run_id = run_id


class ArtifactWriteError(EvidenceIOError):
    def __init__(self, message: str, *, filename: str) -> None:
        super().__init__(f"Failed to write artifact {filename}: {message}")
        self.filename = filename


__all__ = ["ArtifactWriteError", "EvidenceDirectoryError", "EvidenceIOError"]
