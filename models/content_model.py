from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from utils.dates import format_duration


class Section(str, Enum):
    HERO = "hero"
    ABOUT = "about"
    SKILLS = "skills"
    EXPERIENCES = "experiences"
    PROJECTS = "projects"
    CERTIFICATES = "certificates"
    ACHIEVEMENTS = "achievements"


SINGLETON_SECTIONS = (Section.HERO.value, Section.ABOUT.value)
MESSAGES_COLLECTION = "messages"


def collection_name(collection) -> str:
    """Plain collection name for a Section member or a string."""
    return collection.value if isinstance(collection, Enum) else collection


# Stored documents use camelCase keys, Python attributes are snake_case
class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class ContentRecord(CamelModel):
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"id", "created_at", "updated_at"})

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ------------------- Singletons ------------------------
class SocialLinks(CamelModel):
    github: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None
    email: Optional[str] = None


class Hero(ContentRecord):
    name: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    resume_url: Optional[str] = None
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    cgpa: Optional[str] = None
    pos_x: Optional[float] = None
    pos_y: Optional[float] = None
    zoom: Optional[float] = None
    role: Optional[str] = None


class AcademicDetails(CamelModel):
    ssc: Optional[str] = None
    intermediate: Optional[str] = None
    btech: Optional[str] = None


class About(ContentRecord):
    title: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    academic_details: AcademicDetails = Field(default_factory=AcademicDetails)


# ------------------- Collections ------------------------
class Skill(ContentRecord):
    name: str
    category: str
    level: int = Field(default=80, ge=0, le=100)


class Experience(ContentRecord):
    role: str
    company: str
    description: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    duration: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_legacy_title(cls, data: Any) -> Any:
        return coerce_legacy_title(data)

    @field_validator("skills", mode="before")
    @classmethod
    def split_skills(cls, value: Any) -> Any:
        return split_comma_list(value)

    @model_validator(mode="after")
    def derive_duration(self) -> "Experience":
        if self.start_date:
            self.duration = format_duration(self.start_date, self.end_date)
        return self


class Project(ContentRecord):
    title: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    technologies: str = ""
    demo_link: Optional[str] = None
    github_link: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_legacy_links(cls, data: Any) -> Any:
        return coerce_legacy_links(data)

    @field_validator("technologies", mode="before")
    @classmethod
    def join_technologies(cls, value: Any) -> Any:
        return "" if value is None else join_comma_list(value)

    @property
    def technology_list(self) -> List[str]:
        return split_technologies(self.technologies)


class Certificate(ContentRecord):
    title: str
    issuer: str
    date: Optional[str] = None
    category: Optional[str] = None
    credential_id: Optional[str] = None
    image_url: Optional[str] = None
    credential_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_issued_by(cls, data: Any) -> Any:
        return coerce_issued_by(data)


class Achievement(ContentRecord):
    title: str
    date: Optional[str] = None
    description: Optional[str] = None


class ContactMessage(ContentRecord):
    name: str = Field(min_length=2)
    email: EmailStr
    message: str = Field(min_length=10)


def split_technologies(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


# Forms send lists as "a, b" strings and API clients send JSON arrays
def split_comma_list(value: Any) -> Any:
    return split_technologies(value) if isinstance(value, str) else value


def join_comma_list(value: Any) -> Any:
    if isinstance(value, list):
        return ", ".join(str(item).strip() for item in value)
    return value


def coerce_legacy_title(data: Any) -> Any:
    # older documents called the role "title"
    if isinstance(data, dict) and "title" in data:
        data = dict(data)
        title = data.pop("title")
        data.setdefault("role", title)
    return data


def coerce_legacy_links(data: Any) -> Any:
    if isinstance(data, dict):
        data = dict(data)
        if "liveUrl" in data:
            live_url = data.pop("liveUrl")
            data.setdefault("demoLink", live_url)
        if "githubUrl" in data:
            github_url = data.pop("githubUrl")
            data.setdefault("githubLink", github_url)
    return data


def coerce_issued_by(data: Any) -> Any:
    """Certificates are stored with ``issuer``; ``issuedBy`` is the legacy name."""
    if isinstance(data, dict) and "issuedBy" in data:
        data = dict(data)
        issued_by = data.pop("issuedBy")
        data.setdefault("issuer", issued_by)
    return data


SECTION_MODELS: Dict[str, Type[ContentRecord]] = {
    Section.HERO.value: Hero,
    Section.ABOUT.value: About,
    Section.SKILLS.value: Skill,
    Section.EXPERIENCES.value: Experience,
    Section.PROJECTS.value: Project,
    Section.CERTIFICATES.value: Certificate,
    Section.ACHIEVEMENTS.value: Achievement,
}

COLLECTION_MODELS: Dict[str, Type[ContentRecord]] = {
    **SECTION_MODELS,
    MESSAGES_COLLECTION: ContactMessage,
}


def model_for(collection) -> Type[ContentRecord]:
    name = collection_name(collection)
    try:
        return COLLECTION_MODELS[name]
    except KeyError:
        raise ValueError(f"Unknown collection '{name}'")
