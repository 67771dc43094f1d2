"""Knowledge document and website crawl repositories."""

from __future__ import annotations

from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from agentvox.db.models import (
    CrawlStatus,
    DocumentType,
    KnowledgeDocument,
    WebsiteCrawl,
    as_utc,
    dump_json_object,
    utcnow,
)


class AsyncKnowledgeDocumentRepository:
    """Async repository for knowledge documents."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, document_id: int) -> KnowledgeDocument | None:
        return await self.session.get(KnowledgeDocument, document_id)

    async def list(self, *, agent_id: int | None = None) -> list[KnowledgeDocument]:
        """Documents, newest first."""
        query = select(KnowledgeDocument)
        if agent_id is not None:
            query = query.where(KnowledgeDocument.agent_id == agent_id)  # type: ignore[arg-type]
        query = query.order_by(
            desc(KnowledgeDocument.created_at),  # type: ignore[arg-type]
            desc(KnowledgeDocument.id),  # type: ignore[arg-type]
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(
        self,
        *,
        name: str,
        type: DocumentType,
        content: str,
        source: str | None = None,
        agent_id: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> KnowledgeDocument:
        document = KnowledgeDocument(
            name=name,
            type=type,
            content=content,
            source=source,
            agent_id=agent_id,
            metadata_json=dump_json_object(metadata),
        )
        self.session.add(document)
        await self.session.flush()
        return document


class AsyncWebsiteCrawlRepository:
    """Async repository for website crawls."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, crawl_id: int) -> WebsiteCrawl | None:
        return await self.session.get(WebsiteCrawl, crawl_id)

    async def create(
        self,
        *,
        url: str,
        user_id: int,
        agent_id: int | None = None,
        crawl_config: dict[str, Any] | None = None,
        **fields,
    ) -> WebsiteCrawl:
        crawl = WebsiteCrawl(
            url=url,
            user_id=user_id,
            agent_id=agent_id,
            status=CrawlStatus.pending,
            crawl_config_json=dump_json_object(crawl_config),
            **fields,
        )
        self.session.add(crawl)
        await self.session.flush()
        return crawl

    async def update(self, crawl_id: int, **fields) -> WebsiteCrawl | None:
        crawl = await self.get(crawl_id)
        if not crawl:
            return None
        for key, value in fields.items():
            setattr(crawl, key, value)
        crawl.updated_at = utcnow()
        self.session.add(crawl)
        return crawl

    async def list_for_agent(self, agent_id: int) -> list[WebsiteCrawl]:
        """Crawls for an agent: pending first, then newest scheduled/created."""
        query = select(WebsiteCrawl).where(WebsiteCrawl.agent_id == agent_id)  # type: ignore[arg-type]
        result = await self.session.execute(query)
        crawls = list(result.scalars().all())

        crawls.sort(key=lambda c: as_utc(c.scheduled_at or c.created_at), reverse=True)
        crawls.sort(key=lambda c: c.status != CrawlStatus.pending)
        return crawls
