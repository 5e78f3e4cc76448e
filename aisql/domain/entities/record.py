"""Record entity — a source row (email, article, image, voicemail) fed to an AI call."""

from dataclasses import dataclass
from datetime import datetime

from aisql.domain.value_objects.file_ref import FileRef


@dataclass
class Record:
    key: str
    content: str | None = None
    file: FileRef | None = None
    user_id: int | None = None
    created_at: datetime | None = None
    source: str = "emails"

    @property
    def payload(self) -> str | FileRef | None:
        """The input of the AI call: staged file if present, otherwise the text."""
        if self.file is not None:
            return self.file
        return self.content

    def has_input(self) -> bool:
        if self.file is not None:
            return True
        return bool(self.content and self.content.strip())
