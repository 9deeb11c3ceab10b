from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ========================= GENERATION RESULT =========================
# Shape the model is asked to return. Strict: no coercion of mistyped fields.

class UserStory(BaseModel):
    model_config = ConfigDict(strict=True)

    story_name: str
    description: str
    label: str
    status: str
    acceptance_criteria: List[str]
    nfrs: List[str] = Field(default_factory=list)
    definition_of_done: List[str]
    definition_of_ready: List[str]


class Epic(BaseModel):
    model_config = ConfigDict(strict=True)

    epic_name: str
    epic_description: str
    user_stories: List[UserStory]


class GenerationResult(BaseModel):
    model_config = ConfigDict(strict=True)

    epics: List[Epic]


# ========================= API =========================

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UploadResponse(CamelModel):
    document_id: int
    generation_id: int
    message: str


class DocumentResponse(CamelModel):
    id: int
    filename: str
    content: str
    uploaded_at: datetime


class GenerationResponse(CamelModel):
    id: int
    document_id: int
    epics: Any
    status: str
    created_at: datetime
    completed_at: Optional[datetime] = None
