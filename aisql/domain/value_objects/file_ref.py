"""FileRef value object — a staged file passed to a multimodal AI function."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FileRef:
    stage: str
    path: str

    def __post_init__(self):
        if not self.stage.startswith("@"):
            raise ValueError(f"Stage name must start with '@', got {self.stage!r}")
        if not self.path.strip():
            raise ValueError("File path must not be empty")

    @classmethod
    def parse(cls, ref: str) -> "FileRef":
        """Parse '@STAGE/dir/file.png' into a FileRef."""
        ref = ref.strip()
        stage, sep, path = ref.partition("/")
        if not sep:
            raise ValueError(f"File reference must look like '@stage/path', got {ref!r}")
        return cls(stage=stage, path=path)

    def __str__(self) -> str:
        return f"{self.stage}/{self.path}"
