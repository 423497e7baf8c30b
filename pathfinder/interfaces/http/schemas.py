from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

Experience = Literal["beginner", "intermediate", "advanced"]
Difficulty = Literal["beginner", "intermediate", "advanced", "professional"]


class CamelModel(BaseModel):
    """Request bodies use camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Auth

class RegisterReq(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)

class LoginReq(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

class UserResp(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    profile: dict[str, Any] = {}

class TokenResp(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: UserResp


# Users

class Preferences(CamelModel):
    learning_style: Optional[str] = None
    time_commitment: Optional[str] = None

class ProfileUpdateReq(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    skills: Optional[list[str]] = None
    experience: Optional[Experience] = None
    goals: Optional[list[str]] = None
    preferences: Optional[Preferences] = None


# AI

class AnalyzeDomainReq(CamelModel):
    domain: str = Field(min_length=1)
    level: Optional[str] = None

class SkillResourcesReq(CamelModel):
    skill: str = Field(min_length=1)
    level: str = "beginner"

class DailyTasksReq(CamelModel):
    domain: str = Field(min_length=1)
    skills: list[str] = Field(min_length=1)
    level: str = "Beginner"
    duration: int = Field(default=10, ge=1, le=365)
    save_path: bool = False

class FeedbackBody(CamelModel):
    rating: int = Field(ge=1, le=5)
    difficulty: Optional[str] = None
    most_helpful: Optional[str] = None
    improvements: Optional[str] = None
    would_recommend: Optional[str] = None
    additional_comments: Optional[str] = None
    domain: Optional[str] = None
    level: Optional[str] = None
    skills: list[str] = []
    completed_days: int = 0
    total_tasks: int = 0

class FeedbackReq(CamelModel):
    feedback: FeedbackBody


# Certificates

class GenerateCertificateReq(CamelModel):
    domain: str = Field(min_length=1)
    skills: list[str] = Field(min_length=1)
    level: str = "Intermediate"
    completion_rate: float = Field(default=100, ge=0, le=100)


# Assessment

class GenerateAssessmentReq(CamelModel):
    skill_level: str = "intermediate"
    domain: str = "javascript"

class AnalyzeAssessmentReq(CamelModel):
    assessment_id: Optional[str] = None
    questions: list[dict[str, Any]] = Field(min_length=1)
    answers: list[Any]
    time_spent: float = Field(default=0, ge=0)
    domain: str = "javascript"
    difficulty: Optional[str] = None


# Learning paths

class ModuleIn(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    resources: list[Any] = []
    completed: bool = False
    completed_at: Optional[str] = None
    order: Optional[int] = None

class PathCreateReq(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty: Difficulty = "beginner"
    domain: Optional[str] = None
    level: Optional[str] = None
    skills: list[str] = []
    tags: list[str] = []
    modules: list[ModuleIn] = []
    total_days: int = Field(default=30, ge=1)

class PathUpdateReq(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    domain: Optional[str] = None
    level: Optional[str] = None
    skills: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    modules: Optional[list[ModuleIn]] = None
    current_day: Optional[int] = Field(default=None, ge=1)
    total_days: Optional[int] = Field(default=None, ge=1)
    is_completed: Optional[bool] = None


# Progress

class TaskState(CamelModel):
    completed: bool = False
    completed_at: Optional[str] = None
    time_spent: int = Field(default=0, ge=0)

class ProgressUpdateReq(CamelModel):
    learning_path_id: str = Field(min_length=1, max_length=64)
    domain: Optional[str] = None
    current_day: int = Field(default=1, ge=1)
    total_days: int = Field(default=1, ge=1)
    completed_tasks: dict[str, TaskState] = {}
    overall_progress: float = Field(default=0, ge=0, le=100)
    time_spent: Optional[int] = Field(default=None, ge=0)
    score: Optional[float] = Field(default=None, ge=0, le=100)

class CompleteTaskReq(CamelModel):
    task_id: str = Field(min_length=1, max_length=128)
    domain: Optional[str] = None
    day: Optional[int] = Field(default=None, ge=1)
    task_index: Optional[int] = Field(default=None, ge=0)
    learning_path_id: Optional[str] = Field(default=None, max_length=64)
    time_spent: int = Field(default=0, ge=0)
