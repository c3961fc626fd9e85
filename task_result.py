"""
TaskResult - Structured return type for one workflow run.

Exactly one of (success with an output path) or (failure with an error) holds.
"""
from dataclasses import dataclass
from typing import Any, Optional, Dict


@dataclass
class TaskResult:
    """
    Outcome of processing one input document.

    Attributes:
        success: Whether the artifact was downloaded and saved
        file_path: Where the artifact was saved (success only)
        file_size: Size of the saved artifact in bytes (success only)
        error: Error message (failure only)

    Example:
        >>> result = runner.process_file(page, "cv-template.docx")
        >>> if result:
        ...     print(f"Saved {result.file_path} ({result.file_size} bytes)")
    """
    success: bool
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    error: Optional[str] = None

    def __post_init__(self):
        if self.success and (not self.file_path or self.error is not None):
            raise ValueError("A successful TaskResult needs a file_path and no error")
        if not self.success and (not self.error or self.file_path is not None):
            raise ValueError("A failed TaskResult needs an error and no file_path")

    @classmethod
    def ok(cls, file_path: str, file_size: int) -> "TaskResult":
        return cls(success=True, file_path=file_path, file_size=file_size)

    @classmethod
    def failure(cls, error: str) -> "TaskResult":
        return cls(success=False, error=error or "Unknown error")

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        status = "✅" if self.success else "❌"
        if self.success:
            return f"TaskResult({status}, file_path='{self.file_path}', file_size={self.file_size})"
        return f"TaskResult({status}, error='{self.error}')"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for serialization.

        Returns:
            Dict with only the fields that apply to this outcome
        """
        if self.success:
            return {"success": True, "file_path": self.file_path, "file_size": self.file_size}
        return {"success": False, "error": self.error}
