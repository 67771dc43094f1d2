"""Knowledge base endpoints: documents and website crawls.

Crawled sites are turned into `website` documents through Firecrawl;
raw text can be added directly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from agentvox.api.schemas import CamelModel, describe_validation_error
from agentvox.config import Settings, get_settings
from agentvox.db.models import (
    CrawlStatus,
    DocumentType,
    KnowledgeDocument,
    WebsiteCrawl,
    utcnow,
)
from agentvox.db.repositories import (
    AsyncAgentRepository,
    AsyncKnowledgeDocumentRepository,
    AsyncUserRepository,
    AsyncWebsiteCrawlRepository,
)
from agentvox.db.session import get_session
from agentvox.logging_config import get_logger
from agentvox.services.crawl import CrawlServiceError, FirecrawlClient

logger: Any = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Schemas
# =============================================================================


class DocumentCreate(CamelModel):
    """Raw text ingestion."""

    name: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)
    agent_id: int | None = None


class DocumentResponse(CamelModel):
    id: int
    name: str
    type: DocumentType
    source: str | None
    content: str
    metadata: dict[str, Any]
    agent_id: int | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document: KnowledgeDocument) -> DocumentResponse:
        return cls(
            id=document.id,
            name=document.name,
            type=document.type,
            source=document.source,
            content=document.content,
            metadata=document.document_metadata,
            agent_id=document.agent_id,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class CrawlConfig(CamelModel):
    depth: int | None = Field(None, ge=1)
    max_pages: int | None = Field(None, ge=1)
    selector: str | None = None
    filters: list[str] = Field(default_factory=list)


class CrawlCreate(CamelModel):
    url: str = Field(min_length=1, max_length=2000)
    user_id: int | None = None
    agent_id: int | None = None
    crawl_config: CrawlConfig | None = None
    scheduled_at: datetime | None = None
    schedule_recurrence: str | None = Field(None, max_length=20)


class CrawlResponse(CamelModel):
    id: int
    url: str
    status: CrawlStatus
    user_id: int
    agent_id: int | None
    crawl_config: dict[str, Any]
    scheduled_at: datetime | None
    schedule_recurrence: str | None
    last_run_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_crawl(cls, crawl: WebsiteCrawl) -> CrawlResponse:
        return cls(
            id=crawl.id,
            url=crawl.url,
            status=crawl.status,
            user_id=crawl.user_id,
            agent_id=crawl.agent_id,
            crawl_config=crawl.crawl_config,
            scheduled_at=crawl.scheduled_at,
            schedule_recurrence=crawl.schedule_recurrence,
            last_run_at=crawl.last_run_at,
            created_at=crawl.created_at,
            updated_at=crawl.updated_at,
        )


def get_crawl_client(settings: Settings = Depends(get_settings)) -> FirecrawlClient:
    return FirecrawlClient(settings)


def _bad_request(content: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=400, content=content)


# =============================================================================
# Documents
# =============================================================================


@router.get("/knowledge-documents", response_model=list[DocumentResponse])
async def list_documents(
    session: AsyncSession = Depends(get_session),
) -> list[DocumentResponse]:
    """List knowledge documents, newest first."""
    documents = await AsyncKnowledgeDocumentRepository(session).list()
    return [DocumentResponse.from_document(d) for d in documents]


@router.post("/knowledge-documents", response_model=DocumentResponse, status_code=201)
async def create_document(
    data: DocumentCreate,
    session: AsyncSession = Depends(get_session),
) -> DocumentResponse | JSONResponse:
    """Add a text document to the knowledge base."""
    if data.agent_id is not None and not await AsyncAgentRepository(session).get(data.agent_id):
        return _bad_request({"error": "Agent not found"})

    document = await AsyncKnowledgeDocumentRepository(session).create(
        name=data.name,
        type=DocumentType.text,
        content=data.content,
        agent_id=data.agent_id,
        metadata={"characterCount": len(data.content)},
    )
    await session.commit()
    await session.refresh(document)
    return DocumentResponse.from_document(document)


# =============================================================================
# Website crawls
# =============================================================================


@router.post("/crawl", status_code=201, response_model=None)
async def crawl_website(
    request: Request,
    session: AsyncSession = Depends(get_session),
    crawler: FirecrawlClient = Depends(get_crawl_client),
) -> dict[str, Any] | JSONResponse:
    """Crawl a site into a `website` knowledge document.

    The crawl record is saved as pending first so a failed crawl stays
    visible with status `failed`.
    """
    try:
        payload = CrawlCreate.model_validate(await request.json())
    except ValueError as e:
        details = (
            describe_validation_error(e)
            if isinstance(e, ValidationError)
            else "Request body must be JSON"
        )
        return _bad_request({"error": "Invalid crawl request", "details": details})

    if payload.user_id is None:
        logger.error("No user ID provided in crawl request")
        return _bad_request({"error": "User ID is required"})

    if not await AsyncUserRepository(session).get(payload.user_id):
        logger.error(f"User with ID {payload.user_id} not found")
        return _bad_request({"error": "Invalid user ID", "details": "User not found in database"})

    if payload.agent_id is not None and not await AsyncAgentRepository(session).get(
        payload.agent_id
    ):
        logger.error(f"Agent with ID {payload.agent_id} not found")
        return _bad_request({"error": "Agent not found"})

    crawls = AsyncWebsiteCrawlRepository(session)
    config = (
        payload.crawl_config.model_dump(by_alias=True, exclude_none=True)
        if payload.crawl_config
        else None
    )
    crawl = await crawls.create(
        url=payload.url,
        user_id=payload.user_id,
        agent_id=payload.agent_id,
        crawl_config=config,
        scheduled_at=payload.scheduled_at,
        schedule_recurrence=payload.schedule_recurrence,
    )
    await session.commit()

    try:
        result = await crawler.crawl(payload.url, config)
    except CrawlServiceError as e:
        logger.error(f"Crawl {crawl.id} failed: {e}")
        await crawls.update(crawl.id, status=CrawlStatus.failed)
        await session.commit()
        return _bad_request(
            {"error": "Failed to crawl website", "details": str(e), "crawlId": crawl.id}
        )

    document = await AsyncKnowledgeDocumentRepository(session).create(
        name=f"Crawled: {payload.url}",
        type=DocumentType.website,
        source=payload.url,
        content=result.content,
        agent_id=payload.agent_id,
        metadata={
            "crawledAt": utcnow().isoformat(),
            "pageCount": result.page_count,
            "crawlStats": result.stats,
        },
    )
    await crawls.update(crawl.id, status=CrawlStatus.completed, last_run_at=utcnow())
    await session.commit()
    await session.refresh(crawl)
    await session.refresh(document)

    logger.info(f"Crawl {crawl.id} produced document {document.id}")
    return {
        "crawl": CrawlResponse.from_crawl(crawl).model_dump(mode="json", by_alias=True),
        "document": DocumentResponse.from_document(document).model_dump(
            mode="json", by_alias=True
        ),
    }


@router.get("/crawl/{agent_id}", response_model=list[CrawlResponse])
async def list_crawls(
    agent_id: int,
    session: AsyncSession = Depends(get_session),
) -> list[CrawlResponse]:
    """Crawls for an agent, pending first, then most recent."""
    crawls = await AsyncWebsiteCrawlRepository(session).list_for_agent(agent_id)
    return [CrawlResponse.from_crawl(c) for c in crawls]
