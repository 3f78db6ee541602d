import asyncio
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from config.log_config import get_logger
from models.content_model import (
    About,
    Achievement,
    Certificate,
    ContentRecord,
    Experience,
    Hero,
    Project,
    Section,
    Skill,
    SINGLETON_SECTIONS,
    collection_name,
)
from services.content_store import ContentStore
from utils.dates import format_duration
from utils.defaults import DEFAULT_ABOUT, DEFAULT_HERO
from utils.exceptions import StoreError
from validation.content_types import UPDATE_MODELS, PartialUpdate

logger = get_logger("portfolio_cache")

SECTIONS = tuple(section.value for section in Section)


class SectionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class PortfolioCache:
    """In-memory mirror of every portfolio section for the lifetime of the app.

    Built once at start-up and shared by the public page, the JSON API and the
    admin endpoints. Each section loads independently: it has its own state,
    loading flag and last error, so one failed fetch never hides the others.

    Mutations go through the store first and are only spliced into the cache
    once the store call succeeded. Store errors are re-raised to the caller.
    """

    def __init__(self, store: ContentStore):
        self.store = store
        self._data: Dict[str, Any] = {
            name: (None if name in SINGLETON_SECTIONS else []) for name in SECTIONS
        }
        self.state: Dict[str, SectionState] = {name: SectionState.UNINITIALIZED for name in SECTIONS}
        self.errors: Dict[str, Optional[str]] = {name: None for name in SECTIONS}

    # ------------------- Cached data ------------------------
    @property
    def hero(self) -> Optional[Hero]:
        return self._data[Section.HERO.value]

    @property
    def about(self) -> Optional[About]:
        return self._data[Section.ABOUT.value]

    @property
    def skills(self) -> List[Skill]:
        return self._data[Section.SKILLS.value]

    @property
    def experiences(self) -> List[Experience]:
        return self._data[Section.EXPERIENCES.value]

    @property
    def projects(self) -> List[Project]:
        return self._data[Section.PROJECTS.value]

    @property
    def certificates(self) -> List[Certificate]:
        return self._data[Section.CERTIFICATES.value]

    @property
    def achievements(self) -> List[Achievement]:
        return self._data[Section.ACHIEVEMENTS.value]

    @property
    def loading(self) -> Dict[str, bool]:
        return {name: state == SectionState.LOADING for name, state in self.state.items()}

    def section(self, section) -> Union[Optional[ContentRecord], List[ContentRecord]]:
        return self._data[self._section_name(section)]

    def hero_or_default(self) -> Hero:
        return self.hero or DEFAULT_HERO

    def about_or_default(self) -> About:
        return self.about or DEFAULT_ABOUT

    def skills_by_category(self) -> Dict[str, List[Skill]]:
        grouped: Dict[str, List[Skill]] = {}
        for skill in self.skills:
            grouped.setdefault(skill.category, []).append(skill)
        return grouped

    # ------------------- Loading ------------------------
    async def initialize(self) -> Dict[str, Optional[str]]:
        """Fetch every section concurrently. Returns the per-section errors."""
        await asyncio.gather(*(self._load(name) for name in SECTIONS))
        failed = [name for name, error in self.errors.items() if error]
        if failed:
            logger.warning(f"Portfolio cache ready with errors in: {', '.join(failed)}")
        else:
            logger.info("Portfolio cache ready")
        return dict(self.errors)

    async def refresh(self, section) -> None:
        """Re-fetch one section and replace its snapshot wholesale."""
        await self._fetch(self._section_name(section))

    async def _load(self, name: str) -> None:
        try:
            await self._fetch(name)
        except StoreError as e:
            # recorded in self.errors, the remaining sections keep loading
            logger.error(f"Error fetching {name}: {e.message}")

    async def _fetch(self, name: str) -> None:
        self.state[name] = SectionState.LOADING
        try:
            records = await self.store.fetch_all(name)
            self._replace(name, records)
            self.errors[name] = None
        except StoreError as e:
            self.errors[name] = e.message
            raise
        finally:
            self.state[name] = SectionState.READY

    def _replace(self, name: str, records: List[ContentRecord]) -> None:
        if name in SINGLETON_SECTIONS:
            self._data[name] = records[0] if records else None
        else:
            self._data[name] = list(records)

    # ------------------- Generic mutations ------------------------
    async def add(self, section, record: Union[ContentRecord, Dict[str, Any]]) -> ContentRecord:
        name = self._section_name(section)
        created = await self.store.add(name, record)
        self._splice(name, created)
        return created

    async def update(self, section, record_id: str, changes: Union[PartialUpdate, Dict[str, Any]]) -> ContentRecord:
        name = self._section_name(section)
        changes = self._validate_changes(name, changes)
        if name == Section.EXPERIENCES.value:
            changes = await self._with_duration(record_id, changes)

        updated = await self.store.update(name, record_id, changes)
        self._splice(name, updated)
        return updated

    async def delete(self, section, record_id: str) -> str:
        name = self._section_name(section)
        await self.store.delete(name, record_id)

        if name in SINGLETON_SECTIONS:
            current = self._data[name]
            if current is not None and current.id == record_id:
                self._data[name] = None
        else:
            self._data[name] = [record for record in self._data[name] if record.id != record_id]
        return record_id

    async def upsert_singleton(self, section, changes: Union[PartialUpdate, Dict[str, Any]]) -> ContentRecord:
        """Update the hero/about document, creating it when none exists."""
        name = self._section_name(section)
        if name not in SINGLETON_SECTIONS:
            raise ValueError(f"'{name}' is not a singleton section")

        changes = self._validate_changes(name, changes)
        current = self._data[name]
        if current is None:
            # the cached copy may be empty only because the initial fetch failed
            existing = await self.store.fetch_all(name)
            current = existing[0] if existing else None

        if current is not None and current.id:
            return await self.update(name, current.id, changes)
        return await self.add(name, changes)

    def _splice(self, name: str, record: ContentRecord) -> None:
        if name in SINGLETON_SECTIONS:
            self._data[name] = record
            return

        items = self._data[name]
        if any(item.id == record.id for item in items):
            self._data[name] = [record if item.id == record.id else item for item in items]
        else:
            self._data[name] = [*items, record]

    def _validate_changes(self, name: str, changes: Union[PartialUpdate, Dict[str, Any]]) -> Dict[str, Any]:
        if not isinstance(changes, PartialUpdate):
            changes = UPDATE_MODELS[name].model_validate(changes)
        return changes.changes()

    async def _with_duration(self, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if "startDate" not in changes and "endDate" not in changes:
            return changes

        current = self._find(Section.EXPERIENCES.value, record_id)
        if current is None:
            current = await self.store.get(Section.EXPERIENCES.value, record_id)

        start_date = changes.get("startDate", current.start_date)
        end_date = changes.get("endDate", current.end_date)
        duration = format_duration(start_date, end_date) if start_date else ""
        return {**changes, "duration": duration}

    def _find(self, name: str, record_id: str) -> Optional[ContentRecord]:
        return next((item for item in self._data[name] if item.id == record_id), None)

    def _section_name(self, section) -> str:
        name = collection_name(section)
        if name not in SECTIONS:
            raise ValueError(f"Unknown portfolio section '{name}'")
        return name

    # ------------------- Per-kind helpers ------------------------
    async def update_hero(self, changes) -> Hero:
        return await self.upsert_singleton(Section.HERO, changes)

    async def update_about(self, changes) -> About:
        return await self.upsert_singleton(Section.ABOUT, changes)

    async def add_skill(self, skill) -> Skill:
        return await self.add(Section.SKILLS, skill)

    async def update_skill(self, skill_id: str, changes) -> Skill:
        return await self.update(Section.SKILLS, skill_id, changes)

    async def delete_skill(self, skill_id: str) -> str:
        return await self.delete(Section.SKILLS, skill_id)

    async def add_experience(self, experience) -> Experience:
        return await self.add(Section.EXPERIENCES, experience)

    async def update_experience(self, experience_id: str, changes) -> Experience:
        return await self.update(Section.EXPERIENCES, experience_id, changes)

    async def delete_experience(self, experience_id: str) -> str:
        return await self.delete(Section.EXPERIENCES, experience_id)

    async def add_project(self, project) -> Project:
        return await self.add(Section.PROJECTS, project)

    async def update_project(self, project_id: str, changes) -> Project:
        return await self.update(Section.PROJECTS, project_id, changes)

    async def delete_project(self, project_id: str) -> str:
        return await self.delete(Section.PROJECTS, project_id)

    async def add_certificate(self, certificate) -> Certificate:
        return await self.add(Section.CERTIFICATES, certificate)

    async def update_certificate(self, certificate_id: str, changes) -> Certificate:
        return await self.update(Section.CERTIFICATES, certificate_id, changes)

    async def delete_certificate(self, certificate_id: str) -> str:
        return await self.delete(Section.CERTIFICATES, certificate_id)

    async def add_achievement(self, achievement) -> Achievement:
        return await self.add(Section.ACHIEVEMENTS, achievement)

    async def update_achievement(self, achievement_id: str, changes) -> Achievement:
        return await self.update(Section.ACHIEVEMENTS, achievement_id, changes)

    async def delete_achievement(self, achievement_id: str) -> str:
        return await self.delete(Section.ACHIEVEMENTS, achievement_id)

    # ------------------- Serialization ------------------------
    def section_snapshot(self, section) -> Dict[str, Any]:
        name = self._section_name(section)
        return {
            "section": name,
            "data": _to_json(self._data[name]),
            "loading": self.state[name] == SectionState.LOADING,
            "state": self.state[name].value,
            "error": self.errors[name],
        }

    def snapshot(self) -> Dict[str, Any]:
        data = {name: _to_json(self._data[name]) for name in SECTIONS}
        return {**data, "loading": self.loading, "errors": dict(self.errors)}


def _to_json(value):
    if value is None:
        return None
    if isinstance(value, list):
        return [item.to_json() for item in value]
    return value.to_json()
