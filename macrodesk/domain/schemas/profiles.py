from pydantic import BaseModel, Field
from typing import List, Optional


class ProfileCreateRequest(BaseModel):
    name: Optional[str] = None


class ProfileSummaryResponse(BaseModel):
    id: str
    name: str


class ProfileFileResponse(BaseModel):
    title: str
    date: str
    type: str
    tags: List[str] = Field(default_factory=list)
    content: str = ""


class ProfileResponse(BaseModel):
    id: str
    name: str
    files: List[ProfileFileResponse] = Field(default_factory=list)


class ProfileFileUpdate(BaseModel):
    date: Optional[str] = None
    tags: Optional[List[str]] = None
    title: Optional[str] = None
