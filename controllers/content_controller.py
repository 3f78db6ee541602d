from typing import Any, Dict

from fastapi import status
from fastapi.responses import JSONResponse

from config.log_config import get_logger
from models.content_model import (
    MESSAGES_COLLECTION,
    SECTION_MODELS,
    SINGLETON_SECTIONS,
    ContactMessage,
    Section,
)
from services.content_store import ContentStore
from services.portfolio_cache import PortfolioCache
from utils.send_mail import send_contact_notification

logger = get_logger("content_api")


# ------------------- Public ------------------------
async def get_portfolio_snapshot(portfolio: PortfolioCache):
    return JSONResponse(content=portfolio.snapshot(), status_code=status.HTTP_200_OK)


async def get_section_snapshot(section: Section, portfolio: PortfolioCache):
    return JSONResponse(content=portfolio.section_snapshot(section), status_code=status.HTTP_200_OK)


async def submit_contact_message(payload: ContactMessage, store: ContentStore):
    message = await store.add(MESSAGES_COLLECTION, payload)
    logger.info(f"Contact message {message.id} from {message.email}")

    notified = await send_contact_notification(message)
    return JSONResponse(
        content={
            "message": "Thanks for reaching out. I'll get back to you soon.",
            "id": message.id,
            "notified": notified,
        },
        status_code=status.HTTP_201_CREATED
    )


# ------------------- Admin ------------------------
async def add_record(section: Section, payload: Dict[str, Any], portfolio: PortfolioCache):
    if section.value in SINGLETON_SECTIONS:
        # hero/about hold a single document
        return await upsert_singleton(section, payload, portfolio)

    record = SECTION_MODELS[section.value].model_validate(payload)
    created = await portfolio.add(section, record)
    logger.info(f"Added {section.value} record {created.id}")
    return JSONResponse(content=created.to_json(), status_code=status.HTTP_201_CREATED)


async def get_record(section: Section, record_id: str, portfolio: PortfolioCache):
    record = await portfolio.store.get(section, record_id)
    return JSONResponse(content=record.to_json(), status_code=status.HTTP_200_OK)


async def update_record(section: Section, record_id: str, payload: Dict[str, Any], portfolio: PortfolioCache):
    updated = await portfolio.update(section, record_id, payload)
    logger.info(f"Updated {section.value} record {record_id}")
    return JSONResponse(content=updated.to_json(), status_code=status.HTTP_200_OK)


async def delete_record(section: Section, record_id: str, portfolio: PortfolioCache):
    await portfolio.delete(section, record_id)
    logger.info(f"Deleted {section.value} record {record_id}")
    return JSONResponse(
        content={"message": f"{section.value} record deleted successfully", "id": record_id},
        status_code=status.HTTP_200_OK
    )


async def upsert_singleton(section: Section, payload: Dict[str, Any], portfolio: PortfolioCache):
    record = await portfolio.upsert_singleton(section, payload)
    logger.info(f"Saved {section.value} document {record.id}")
    return JSONResponse(content=record.to_json(), status_code=status.HTTP_200_OK)


async def refresh_section(section: Section, portfolio: PortfolioCache):
    await portfolio.refresh(section)
    return JSONResponse(content=portfolio.section_snapshot(section), status_code=status.HTTP_200_OK)


async def list_messages(store: ContentStore):
    messages = await store.fetch_all(MESSAGES_COLLECTION)
    messages.sort(key=lambda m: m.created_at.timestamp() if m.created_at else 0, reverse=True)  # most recent first
    return JSONResponse(content=[m.to_json() for m in messages], status_code=status.HTTP_200_OK)


async def delete_message(message_id: str, store: ContentStore):
    await store.delete(MESSAGES_COLLECTION, message_id)
    return JSONResponse(
        content={"message": "Message deleted successfully", "id": message_id},
        status_code=status.HTTP_200_OK
    )
