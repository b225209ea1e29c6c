from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProbeResult(BaseModel):
    """
    Data model representing the outcome of a single probe.

    A successful probe carries the status, timing, final URL, headers and body
    preview. A failed probe only carries the classified error message.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    status_code: Optional[int] = Field(default=None, alias="statusCode")
    response_time: Optional[int] = Field(default=None, alias="responseTime")
    final_url: Optional[str] = Field(default=None, alias="finalUrl")
    headers: Optional[Dict[str, str]] = None
    body_preview: Optional[str] = Field(default=None, alias="bodyPreview")
    truncated: bool = False
    error: Optional[str] = None
    blocked: bool = False

    @classmethod
    def failure(cls, message: str) -> "ProbeResult":
        """
        Build a failed result. Blocking is never inferred from a transport failure.
        """
        return cls(success=False, error=message, blocked=False)

    def to_payload(self) -> dict:
        """
        Return the JSON payload, using camelCase names and omitting unset fields.
        """
        return self.model_dump(by_alias=True, exclude_none=True)
