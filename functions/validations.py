from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator


PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"
AUTH_PHONE_PATTERN = r"^\+?[1-9]\d{10,14}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
OTP_PATTERN = r"^\d{6}$"


class ProfileForm(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    age: int = Field(..., ge=18, le=100)
    city: str = Field(..., min_length=2, max_length=100)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    about_me: str = Field(..., min_length=10, max_length=1000)
    values: str = Field(..., min_length=10, max_length=1000)
    family_goals: str = Field(..., min_length=10, max_length=1000)
    gender: Optional[str] = None
    looking_for: Optional[str] = None
    children: Optional[str] = None
    smoking: Optional[str] = None
    alcohol: Optional[str] = None
    zodiac_sign: Optional[str] = None
    photos: List[str] = Field(default_factory=list, max_length=9)

    @field_validator("name", "city", "about_me", "values", "family_goals", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("gender", "looking_for", "children", "smoking", "alcohol", "zodiac_sign", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        # selectboxes hand back "" for "not chosen"
        return v or None


class MessageForm(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator("content", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class ReviewForm(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=500)

    @field_validator("comment", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None


class EmailForm(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)


class PhoneForm(BaseModel):
    phone: str = Field(..., pattern=AUTH_PHONE_PATTERN)


class OtpForm(BaseModel):
    token: str = Field(..., pattern=OTP_PATTERN)


def first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ()))
    return f"{field}: {err['msg']}" if field else err["msg"]
