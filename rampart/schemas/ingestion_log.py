"""Response schemas for the ingestion log listing."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class IngestionLogOut(BaseModel):
    """One ingestion log entry, camelCase on the wire."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    filename: str
    original_name: str = Field(..., alias="originalName")
    file_type: str = Field(..., alias="fileType")
    source: str
    profile: str | None = None
    checksum: str | None = None
    rows_processed: int = Field(..., alias="rowsProcessed")
    report_date: datetime | None = Field(default=None, alias="reportDate")
    imported_date: datetime = Field(..., alias="importedDate")
    status: str
    error_log: str | None = Field(default=None, alias="errorLog")


class IngestionLogPage(BaseModel):
    """Newest-first page of logs; pass next_cursor back as cursor for the next page."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[IngestionLogOut]
    next_cursor: int | None = Field(default=None, alias="nextCursor")


class NamingRuleOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str
    pattern: str
    description: str
    examples: list[str]
    file_type: str = Field(..., alias="fileType")
    profile: str
    admin_only: bool = Field(..., alias="adminOnly")
    date_required: bool = Field(..., alias="dateRequired")


class FormatsResponse(BaseModel):
    rules: list[NamingRuleOut]
