from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class OtpPageResponse(BaseModel):
    phone: str
    otp_sent_at: datetime
    expiry_minutes: int = 5


class OtpResentResponse(BaseModel):
    success: bool = True
    message: str
    otp_sent_at: datetime


class AdminOtpPageResponse(BaseModel):
    email: str
    device_id: str
    remaining_time: str | None = None


class ApprovalStatusResponse(BaseModel):
    approved: bool
    message: str
    registration_status: str | None = None
    checked_at: datetime


class EmailSentResponse(BaseModel):
    success: bool = True
    message: str
    email: str
    remaining_time: str
