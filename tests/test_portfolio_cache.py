import pytest
from bson import ObjectId
from pydantic import ValidationError
from pymongo.errors import ServerSelectionTimeoutError

from models.content_model import Section
from services.portfolio_cache import SECTIONS, SectionState
from utils.defaults import DEFAULT_ABOUT, DEFAULT_HERO
from utils.exceptions import NetworkError, NotFoundError


async def test_initialize_loads_sections_independently(portfolio, fake_db):
    fake_db["projects"].docs.append({"_id": ObjectId(), "title": "Portfolio", "technologies": "React"})
    fake_db["skills"].fail_with = ServerSelectionTimeoutError("no servers")

    errors = await portfolio.initialize()

    assert errors["skills"] == "no servers"
    assert all(errors[name] is None for name in SECTIONS if name != "skills")
    assert [p.title for p in portfolio.projects] == ["Portfolio"]
    assert portfolio.skills == []
    assert all(state == SectionState.READY for state in portfolio.state.values())
    assert not any(portfolio.loading.values())


async def test_sections_start_uninitialized(portfolio):
    assert set(portfolio.state.values()) == {SectionState.UNINITIALIZED}
    assert portfolio.hero is None
    assert portfolio.projects == []


async def test_defaults_are_used_until_hero_and_about_exist(portfolio):
    await portfolio.initialize()

    assert portfolio.hero_or_default() is DEFAULT_HERO
    assert (DEFAULT_HERO.name, DEFAULT_HERO.cgpa) == ("Nelavalli Phanindra", "9.42")
    assert portfolio.about_or_default() is DEFAULT_ABOUT

    hero = await portfolio.update_hero({"name": "Jane Doe"})

    assert portfolio.hero_or_default() == hero
    assert hero.name == "Jane Doe"


async def test_project_lifecycle(portfolio, fake_db):
    await portfolio.initialize()

    project = await portfolio.add_project({"title": "Compiler", "technologies": "React, Go"})

    assert len(portfolio.projects) == 1
    assert portfolio.projects[0].technology_list == ["React", "Go"]

    await portfolio.delete_project(project.id)

    assert portfolio.projects == []
    assert fake_db["projects"].docs == []


async def test_update_replaces_record_in_place(portfolio):
    first = await portfolio.add_skill({"name": "Python", "category": "Languages"})
    second = await portfolio.add_skill({"name": "Docker", "category": "Tools"})

    await portfolio.update_skill(first.id, {"level": 95})

    assert [(s.id, s.level) for s in portfolio.skills] == [(first.id, 95), (second.id, 80)]


async def test_failed_mutation_leaves_cache_untouched(portfolio, fake_db):
    skill = await portfolio.add_skill({"name": "Python", "category": "Languages", "level": 70})
    fake_db["skills"].fail_with = ServerSelectionTimeoutError("no servers")

    with pytest.raises(NetworkError):
        await portfolio.update_skill(skill.id, {"level": 99})
    with pytest.raises(NetworkError):
        await portfolio.delete_skill(skill.id)
    with pytest.raises(NetworkError):
        await portfolio.add_skill({"name": "Go", "category": "Languages"})

    assert [(s.name, s.level) for s in portfolio.skills] == [("Python", 70)]


async def test_delete_unknown_id_keeps_cache(portfolio):
    await portfolio.add_achievement({"title": "Dean's list"})

    with pytest.raises(NotFoundError):
        await portfolio.delete_achievement(str(ObjectId()))
    assert len(portfolio.achievements) == 1


async def test_update_rejects_unknown_fields(portfolio, fake_db):
    skill = await portfolio.add_skill({"name": "Python", "category": "Languages"})
    calls = fake_db["skills"].calls

    with pytest.raises(ValidationError):
        await portfolio.update_skill(skill.id, {"colour": "blue"})
    assert fake_db["skills"].calls == calls


async def test_update_ignores_id_and_timestamps(portfolio, fake_db):
    skill = await portfolio.add_skill({"name": "Python", "category": "Languages"})

    updated = await portfolio.update_skill(skill.id, {"id": "other", "createdAt": "2020-01-01", "name": "Python 3"})

    assert updated.id == skill.id
    assert updated.name == "Python 3"
    assert "id" not in fake_db["skills"].docs[0]


async def test_experience_duration_follows_dates(portfolio):
    experience = await portfolio.add_experience({
        "role": "Intern",
        "company": "Acme",
        "startDate": "2023-01",
        "skills": "Python, SQL",
    })

    assert experience.duration == "Jan 2023 - Present"
    assert experience.skills == ["Python", "SQL"]

    updated = await portfolio.update_experience(experience.id, {"endDate": "2024-06-15"})

    assert updated.duration == "Jan 2023 - Jun 2024"
    assert portfolio.experiences[0].duration == "Jan 2023 - Jun 2024"


async def test_clearing_start_date_clears_duration(portfolio, fake_db):
    experience = await portfolio.add_experience({"role": "Intern", "company": "Acme", "startDate": "2023-01"})

    updated = await portfolio.update_experience(experience.id, {"startDate": ""})

    assert updated.start_date == ""
    assert updated.duration == ""
    assert fake_db["experiences"].docs[0]["duration"] == ""


async def test_upsert_singleton_keeps_a_single_document(portfolio, fake_db):
    await portfolio.initialize()

    created = await portfolio.update_about({"title": "About Me"})
    updated = await portfolio.update_about({"subtitle": "Engineer"})

    assert updated.id == created.id
    assert updated.title == "About Me"
    assert updated.subtitle == "Engineer"
    assert len(fake_db["about"].docs) == 1


async def test_upsert_singleton_uses_stored_document_when_cache_is_empty(portfolio, fake_db):
    existing_id = ObjectId()
    fake_db["hero"].docs.append({"_id": existing_id, "name": "Stored Name"})

    hero = await portfolio.update_hero({"subtitle": "Developer"})

    assert hero.id == str(existing_id)
    assert hero.name == "Stored Name"
    assert len(fake_db["hero"].docs) == 1


async def test_upsert_singleton_rejects_collections(portfolio):
    with pytest.raises(ValueError):
        await portfolio.upsert_singleton(Section.SKILLS, {"name": "Go"})


async def test_refresh_replaces_snapshot(portfolio, fake_db):
    await portfolio.initialize()
    fake_db["certificates"].docs.append({"_id": ObjectId(), "title": "CKA", "issuedBy": "CNCF"})

    await portfolio.refresh("certificates")

    assert [(c.title, c.issuer) for c in portfolio.certificates] == [("CKA", "CNCF")]


async def test_failed_refresh_records_error_and_keeps_data(portfolio, fake_db):
    await portfolio.add_skill({"name": "Python", "category": "Languages"})
    fake_db["skills"].fail_with = ServerSelectionTimeoutError("timed out")

    with pytest.raises(NetworkError):
        await portfolio.refresh(Section.SKILLS)

    assert [s.name for s in portfolio.skills] == ["Python"]
    assert portfolio.errors["skills"] == "timed out"
    assert portfolio.state["skills"] == SectionState.READY


async def test_skills_by_category(portfolio):
    await portfolio.add_skill({"name": "Python", "category": "Languages"})
    await portfolio.add_skill({"name": "Docker", "category": "Tools"})
    await portfolio.add_skill({"name": "Go", "category": "Languages"})

    grouped = portfolio.skills_by_category()

    assert list(grouped) == ["Languages", "Tools"]
    assert [s.name for s in grouped["Languages"]] == ["Python", "Go"]


async def test_snapshots_are_json_ready(portfolio):
    await portfolio.initialize()
    await portfolio.add_skill({"name": "Python", "category": "Languages"})

    section = portfolio.section_snapshot("skills")
    assert section["section"] == "skills"
    assert section["state"] == "ready"
    assert section["error"] is None
    assert section["data"][0]["name"] == "Python"
    assert isinstance(section["data"][0]["createdAt"], str)

    snapshot = portfolio.snapshot()
    assert snapshot["hero"] is None
    assert snapshot["loading"]["skills"] is False
    assert set(snapshot["errors"]) == set(SECTIONS)


async def test_unknown_section_is_rejected(portfolio):
    with pytest.raises(ValueError):
        portfolio.section("messages")
