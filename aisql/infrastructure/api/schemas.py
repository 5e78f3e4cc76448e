"""Request bodies and response mapping for the API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from aisql.adapters.persistence.repositories import to_json
from aisql.domain.entities.ai_result import AIResult
from aisql.domain.policies.decisions import status_label
from aisql.domain.value_objects.file_ref import FileRef


class InvokeRequest(BaseModel):
    text: str | list[str] | None = Field(
        default=None, description="Text input, or a list of texts for aggregates and similarity"
    )
    file: str | None = Field(default=None, description="Staged file, e.g. '@DOCS/invoices/a.pdf'")
    files: list[str] | None = Field(default=None, description="Two staged files for similarity")
    model: str | None = None
    options: dict[str, Any] | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    record_key: str | None = None
    label_kind: str = "completion"

    def payload(self) -> Any:
        """Resolve the call payload. Raises ValueError for a bad file reference."""
        if self.files:
            return tuple(FileRef.parse(f) for f in self.files)
        if self.file:
            return FileRef.parse(self.file)
        return self.text


class ProcessRequest(BaseModel):
    file_name: str = Field(description="CSV file inside CSV_DATA_PATH")
    function: str
    model: str | None = None
    options: dict[str, Any] | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    key_column: str = "ticket_id"
    content_column: str | None = "content"
    file_column: str | None = None
    label_kind: str = "completion"


class SourceRequest(BaseModel):
    file_name: str = Field(description="CSV file inside CSV_DATA_PATH")
    source: str = Field(
        default="records", description="'emails', 'articles', or any keyed table described by the columns"
    )
    key_column: str = "ticket_id"
    content_column: str | None = "content"
    file_column: str | None = None
    model: str | None = None


class SearchRequest(SourceRequest):
    query: str
    top_k: int = Field(default=10, ge=1, le=100)


class DuplicatesRequest(SourceRequest):
    threshold: float | None = Field(default=None, ge=-1.0, le=1.0)
    limit: int = Field(default=10, ge=1, le=1000)


class ClustersRequest(SourceRequest):
    threshold: float = Field(default=0.8, ge=-1.0, le=1.0)


class SummariesRequest(SourceRequest):
    group_by: str = "user"
    min_records: int = Field(default=1, ge=1)
    limit: int | None = Field(default=None, ge=1)


class EstimateRequest(BaseModel):
    file_name: str
    key_column: str = "ticket_id"
    content_column: str = "content"
    model: str | None = None
    function_name: str = "ai_complete"


def result_to_dict(result: AIResult, label_kind: str = "completion") -> dict[str, Any]:
    return {
        "id": result.id,
        "record_key": result.record_key,
        "function": result.function.value,
        "model": result.model,
        "status": result.status.value,
        "label": status_label(result, label_kind),
        "value": to_json(result.value),
        "error": str(result.error) if result.error else None,
        "ambiguous": result.ambiguous,
        "contract": result.contract,
        "created_at": result.created_at.isoformat() if result.created_at else None,
    }
