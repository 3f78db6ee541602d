from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from models.content_model import (
    AcademicDetails,
    Section,
    SocialLinks,
    coerce_issued_by,
    coerce_legacy_links,
    coerce_legacy_title,
    join_comma_list,
    split_comma_list,
)

# Update payloads: every field optional, unknown fields rejected.
# Only the fields the client actually sent are written.

STORE_FIELDS = {"id", "_id", "createdAt", "updatedAt", "created_at", "updated_at"}


class PartialUpdate(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="forbid",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_store_fields(cls, data: Any) -> Any:
        # id and timestamps are owned by the store
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if k not in STORE_FIELDS}
        return data

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class HeroUpdate(PartialUpdate):
    name: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    resume_url: Optional[str] = None
    social_links: Optional[SocialLinks] = None
    cgpa: Optional[str] = None
    pos_x: Optional[float] = None
    pos_y: Optional[float] = None
    zoom: Optional[float] = None
    role: Optional[str] = None


class AboutUpdate(PartialUpdate):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    academic_details: Optional[AcademicDetails] = None


class SkillUpdate(PartialUpdate):
    name: Optional[str] = None
    category: Optional[str] = None
    level: Optional[int] = Field(default=None, ge=0, le=100)


class ExperienceUpdate(PartialUpdate):
    role: Optional[str] = None
    company: Optional[str] = None
    description: Optional[str] = None
    skills: Optional[List[str]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_legacy_title(cls, data: Any) -> Any:
        return coerce_legacy_title(data)

    @field_validator("skills", mode="before")
    @classmethod
    def split_skills(cls, value: Any) -> Any:
        return split_comma_list(value)


class ProjectUpdate(PartialUpdate):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    technologies: Optional[str] = None
    demo_link: Optional[str] = None
    github_link: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_legacy_links(cls, data: Any) -> Any:
        return coerce_legacy_links(data)

    @field_validator("technologies", mode="before")
    @classmethod
    def join_technologies(cls, value: Any) -> Any:
        return join_comma_list(value)


class CertificateUpdate(PartialUpdate):
    title: Optional[str] = None
    issuer: Optional[str] = None
    date: Optional[str] = None
    category: Optional[str] = None
    credential_id: Optional[str] = None
    image_url: Optional[str] = None
    credential_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_issued_by(cls, data: Any) -> Any:
        return coerce_issued_by(data)


class AchievementUpdate(PartialUpdate):
    title: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None


UPDATE_MODELS: Dict[str, Type[PartialUpdate]] = {
    Section.HERO.value: HeroUpdate,
    Section.ABOUT.value: AboutUpdate,
    Section.SKILLS.value: SkillUpdate,
    Section.EXPERIENCES.value: ExperienceUpdate,
    Section.PROJECTS.value: ProjectUpdate,
    Section.CERTIFICATES.value: CertificateUpdate,
    Section.ACHIEVEMENTS.value: AchievementUpdate,
}


class AdminLogin(BaseModel):
    email: str
    password: str
