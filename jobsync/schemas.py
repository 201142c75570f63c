"""Pydantic schemas for every payload crossing the network boundary."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from jobsync.errors import ResponseSchemaError

T = TypeVar("T")


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python, unknown keys dropped."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_payload(schema: Any, payload: Any, context: str) -> Any:
    """Validate a decoded JSON body against ``schema`` or raise ResponseSchemaError."""

    try:
        return TypeAdapter(schema).validate_python(payload)
    except ValidationError as exc:
        raise ResponseSchemaError(context, str(exc)) from exc


class ErrorEnvelope(WireModel):
    message: str | None = None
    code: str | None = None


class HealthStatus(WireModel):
    model_config = ConfigDict(extra="allow")

    status: str


# -- auth -------------------------------------------------------------------


class Identity(WireModel):
    id: str
    email: str
    name: str
    role: str


class AuthResponse(WireModel):
    token: str
    user: Identity


class LoginRequest(WireModel):
    email: str
    password: str


class RegisterRequest(WireModel):
    email: str
    password: str
    name: str
    phone: str | None = None
    role: Literal["employee", "employer"] = "employee"


# -- jobs -------------------------------------------------------------------


class Job(WireModel):
    """Opaque job record; only the id is required, everything else passes through."""

    model_config = ConfigDict(extra="allow")

    id: str


class SearchParams(WireModel):
    q: str | None = None
    location: str | None = None
    type: str | None = None
    category: str | None = None
    is_remote: bool | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    experience: str | None = None
    company_size: str | None = None
    page: int | None = None
    limit: int | None = None
    sort_by: Literal["relevance", "date", "salary"] | None = None
    sort_order: Literal["asc", "desc"] | None = None

    def to_query(self) -> dict[str, str]:
        query: dict[str, str] = {}
        for key, value in self.to_wire().items():
            if value == "":
                continue
            query[key] = str(value).lower() if isinstance(value, bool) else str(value)
        return query


class SearchResponse(WireModel):
    jobs: list[Job] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 0
    total_pages: int = 0


class SalaryRange(WireModel):
    min: int
    max: int


class FilterOptions(WireModel):
    job_types: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    experience_levels: list[str] = Field(default_factory=list)
    company_sizes: list[str] = Field(default_factory=list)
    salary_ranges: list[SalaryRange] = Field(default_factory=list)


# -- applications -----------------------------------------------------------


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ApplicationRecord(WireModel):
    """Application as the server stores it."""

    id: str
    user_id: str | None = None
    job_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    cover_letter: str | None = None
    resume_url: str | None = None
    applied_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Application(WireModel):
    """Local application shape kept in the cache."""

    id: str
    job_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    cover_letter: str | None = None
    resume_url: str | None = None
    applied_at: datetime

    @classmethod
    def from_record(cls, record: ApplicationRecord) -> Application:
        applied_at = record.applied_at or record.created_at or datetime.now(timezone.utc)
        return cls(
            id=record.id,
            job_id=record.job_id,
            status=record.status,
            cover_letter=record.cover_letter,
            resume_url=record.resume_url,
            applied_at=applied_at,
        )


class CreateApplicationRequest(WireModel):
    job_id: str
    cover_letter: str | None = None
    resume_url: str | None = None


class UpdateApplicationRequest(WireModel):
    status: ApplicationStatus | None = None
    cover_letter: str | None = None
    resume_url: str | None = None


# -- saved jobs -------------------------------------------------------------


class SavedJobRecord(WireModel):
    """Bookmark row; the server embeds the job it points at."""

    id: str
    user_id: str | None = None
    job_id: str
    saved_at: datetime | None = None
    job: Job | None = None


# -- notifications ----------------------------------------------------------


class Notification(WireModel):
    id: str
    user_id: str | None = None
    title: str
    message: str
    type: str = "system"
    is_read: bool = False
    created_at: datetime | None = None


class UpdateNotificationRequest(WireModel):
    title: str | None = None
    message: str | None = None
    is_read: bool | None = None


# -- profile ----------------------------------------------------------------


class UserProfile(WireModel):
    id: str
    email: str
    name: str
    phone: str | None = None
    role: str = "employee"
    skills: list[str] = Field(default_factory=list)
    resume_url: str | None = None
    avatar_url: str | None = None


class UpdateProfileRequest(WireModel):
    name: str | None = None
    phone: str | None = None
    skills: list[str] | None = None


class SkillsResponse(WireModel):
    skills: list[str] = Field(default_factory=list)


class ResumeUploadResponse(WireModel):
    resume_url: str


class AvatarUploadResponse(WireModel):
    avatar_url: str


# -- companies --------------------------------------------------------------


class Company(WireModel):
    id: str
    name: str
    description: str | None = None
    website: str | None = None
    logo: str | None = None
    industry: str | None = None
    size: str | None = None
    location: str | None = None
    founded_year: int | None = None


class CompanyJobsResponse(WireModel):
    company: Company
    jobs: list[Job] = Field(default_factory=list)
    total: int = 0


class CompanyStats(WireModel):
    total_jobs: int = 0
    active_jobs: int = 0


# -- analytics --------------------------------------------------------------


class ApplicationStats(WireModel):
    total_applications: int = 0
    pending_applications: int = 0
    reviewed_applications: int = 0
    accepted_applications: int = 0
    rejected_applications: int = 0
    application_rate: float = 0.0
    success_rate: float = 0.0
    average_response_time: float = 0.0
    applications_by_month: list[dict[str, Any]] = Field(default_factory=list)
    applications_by_status: list[dict[str, Any]] = Field(default_factory=list)


class JobStats(WireModel):
    total_jobs_viewed: int = 0
    jobs_viewed_today: int = 0
    jobs_viewed_this_week: int = 0
    jobs_viewed_this_month: int = 0
    search_queries: list[dict[str, Any]] = Field(default_factory=list)
    jobs_by_location: list[dict[str, Any]] = Field(default_factory=list)
    jobs_by_category: list[dict[str, Any]] = Field(default_factory=list)


class UserActivityStats(WireModel):
    total_sessions: int = 0
    profile_completion_rate: float = 0.0
    saved_jobs_count: int = 0
    applications_count: int = 0
    most_active_hours: list[int] = Field(default_factory=list)


class DashboardStats(WireModel):
    applications: ApplicationStats
    jobs: JobStats
    user: UserActivityStats
    last_updated: datetime


class UserPerformance(WireModel):
    profile_completion: float
    application_success_rate: float
    average_response_time: float
    most_active_time: str
    improvement_suggestions: list[str] = Field(default_factory=list)
