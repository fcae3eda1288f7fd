"""Request/response schemas for the upload endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response after a file was routed, logged and processed."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    type: str = Field(..., description="Source tag detected from the filename (e.g. secureworks).")
    profile: str = Field(..., description="Format profile that processed the file.")
    filename: str
    rows_processed: int = Field(..., ge=0, alias="rowsProcessed")
    ingestion_id: int = Field(..., alias="ingestionId")
    status: str = Field(..., description="Final ingestion log status: SUCCESS or PARTIAL.")
    created: int = Field(default=0, ge=0)
    updated: int = Field(default=0, ge=0)
    unchanged: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    padded_rows: int = Field(default=0, ge=0, alias="paddedRows")
    error_count: int = Field(default=0, ge=0, alias="errorCount")
    errors: list[str] = Field(
        default_factory=list,
        description="First row error messages (bounded sample).",
    )
    error_csv: str | None = Field(
        default=None,
        alias="errorCsv",
        description="The sampled errors as a Row,Error CSV for download; null when there were none.",
    )


class UploadErrorResponse(BaseModel):
    """Failure body: a human-readable cause plus hints."""

    error: str
    details: list[str] = Field(default_factory=list)
