from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Sheet(BaseModel):
    """One named tab of a workbook: a header row followed by data rows."""
    name: str = Field(..., description="Sheet name as it appears in the workbook")
    rows: List[List[str]] = Field(
        default_factory=list,
        description="Cell values coerced to strings; rows[0] is the header row"
    )

    @property
    def header(self) -> List[str]:
        return self.rows[0] if self.rows else []

    @property
    def data_rows(self) -> List[List[str]]:
        return self.rows[1:]


class SheetSummary(BaseModel):
    name: str = Field(..., description="Sheet name")
    row_count: int = Field(..., description="Number of data rows (header excluded)")
    selected: bool = Field(..., description="Whether the sheet is part of the conversion")


class SessionResponse(BaseModel):
    status: str = Field(default="success", description="Request status")
    message: str = Field(..., description="Status message")
    session_id: str = Field(..., description="Identifier of the conversion session")
    file_name: Optional[str] = Field(default=None, description="Name of the loaded file")
    sheets: List[SheetSummary] = Field(default_factory=list, description="Loaded sheets")


class SelectionRequest(BaseModel):
    """Request model for replacing the sheet selection."""
    sheets: List[str] = Field(..., description="Names of the sheets to convert")

    @field_validator('sheets')
    @classmethod
    def validate_sheets(cls, v):
        # Order is irrelevant, duplicates are collapsed
        return list(dict.fromkeys(v))


class ConversionResponse(BaseModel):
    status: str = Field(..., description="Conversion status")
    message: str = Field(..., description="Status message")
    session_id: str = Field(..., description="Identifier of the conversion session")
    sheet_count: int = Field(..., description="Number of sheets written to the document")
    download_url: str = Field(..., description="Where the XML document can be downloaded")
    file_name: str = Field(..., description="Suggested name of the downloaded document")
    xml: str = Field(..., description="The generated XML document")
    conversion_time: Optional[float] = Field(
        default=None,
        description="Conversion time in milliseconds"
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        description="Timestamp of conversion"
    )


class ErrorResponse(BaseModel):
    status: str = Field(default="error", description="Error status")
    title: str = Field(..., description="Short notification title")
    message: str = Field(..., description="Error message")
    error_code: str = Field(..., description="Error code")
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Timestamp of error"
    )
    details: Optional[str] = Field(
        default=None,
        description="Detailed error information (only shown when SHOW_ERROR_DETAILS is enabled)"
    )


class HealthResponse(BaseModel):
    status: str = Field(..., description="Service health status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Health check timestamp"
    )
