from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime

class UserSummary(BaseModel):
    """Public identity fields shown next to friend requests and in friend lists"""
    id: str
    full_name: str
    profile_pic: Optional[str] = None
    native_language: Optional[str] = None
    learning_language: Optional[str] = None

    class Config:
        from_attributes = True

class UserBase(BaseModel):
    """Base user schema with editable profile attributes"""
    full_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    profile_pic: Optional[str] = None
    native_language: Optional[str] = Field(None, max_length=50)
    learning_language: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=100)

class UserUpdate(UserBase):
    """Schema for updating user information"""

    @validator('full_name')
    def validate_full_name(cls, v):
        if v is None:
            raise ValueError('Full name cannot be null')
        if not v.strip():
            raise ValueError('Full name cannot be blank')
        return v

class OnboardingRequest(UserBase):
    """Profile data required to finish onboarding; blank fields are reported together"""
    pass

class UserResponse(UserBase):
    """Schema for user response"""
    id: str
    email: Optional[str] = None
    full_name: str
    is_onboarded: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
