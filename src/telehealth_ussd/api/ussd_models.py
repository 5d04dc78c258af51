"""Pydantic models for USSD gateway payloads."""

from pydantic import BaseModel, ConfigDict, Field


class UssdRequest(BaseModel):
    """USSD gateway request payload."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    text: str | None = None
    service_code: str | None = Field(default=None, alias="serviceCode")


class UssdResponse(BaseModel):
    """USSD gateway response payload."""

    response: str
