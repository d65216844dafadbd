"""
Data models for the automation service.

This module defines the Pydantic models exchanged with HTTP callers:
- Credentials: member and fraternal-unit login data for the portal
- WorkflowStatus: the fixed set of outcome codes
- WorkflowResult: structured outcome of a workflow or gateway call
- ExportedFile: payload of a successful force sync
- AttemptRecord: one attempt made by the bounded retry helper

JSON field names are camelCase; inputs also accept the Python field names.
"""

from enum import IntEnum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WorkflowStatus(IntEnum):
    """Outcome codes, equal to the HTTP status returned to callers."""

    SUCCESS = 200
    BAD_REQUEST = 400
    INTERNAL_ERROR = 500


class Credentials(BaseModel):
    """Login data for one member of a fraternal unit (FRU).

    Validation Rules:
    - string fields default to "" so an incomplete body still parses and the
      workflow reports which fields are missing
    - p_id, local_lodge_id and fraternal_unit_type are carried through only
    - values are typed into the portal exactly as received; only "" counts
      as missing
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    p_id: int = 0
    local_lodge_id: int = 0
    member_id: str = ""
    lastname: str = ""
    fraternal_unit_type: str = ""
    fru_number: str = ""
    fraternal_unit_passcode: str = Field(default="", repr=False)
    icl_url: Optional[str] = None
    """Per-request login URL; the configured default is used when absent."""

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("member_id", "lastname", "fru_number", "fraternal_unit_passcode")

    def missing_fields(self) -> list[str]:
        """Names of required fields that are empty."""
        return [name for name in self.REQUIRED_FIELDS if not getattr(self, name)]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


class ExportedFile(BaseModel):
    """Location of a saved roster export."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_path: str
    file_name: str


class WorkflowResult(BaseModel):
    """Structured outcome returned by workflows and the gateway.

    Every HTTP response body is a serialized WorkflowResult, including failures.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status_code: int
    success: bool
    message: str = ""
    data: Optional[Any] = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "WorkflowResult":
        return cls(
            status_code=WorkflowStatus.SUCCESS,
            success=True,
            message=message,
            data=data,
        )

    @classmethod
    def bad_request(cls, message: str) -> "WorkflowResult":
        return cls(status_code=WorkflowStatus.BAD_REQUEST, success=False, message=message)

    @classmethod
    def internal_error(cls, message: str) -> "WorkflowResult":
        return cls(status_code=WorkflowStatus.INTERNAL_ERROR, success=False, message=message)

    def to_response(self) -> dict[str, Any]:
        """Serialize with camelCase keys for the JSON body."""
        body = self.model_dump(by_alias=True, mode="json")
        body["statusCode"] = int(self.status_code)
        return body


class AttemptRecord(BaseModel):
    """Record of a single attempt made by the bounded retry helper.

    Validation Rules:
    - attempt is 1-based
    - duration_ms must be >= 0
    - error is None when success is True
    """

    attempt: int = Field(ge=1)
    success: bool
    duration_ms: int = Field(ge=0)
    error: Optional[str] = None
