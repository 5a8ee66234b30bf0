"""SQLite preview store implementation using SQLAlchemy."""

from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from ..config import Settings
from ..core.interfaces import PreviewStoreInterface
from ..observability import LoggerMixin
from .models import Base, PreviewSessionModel


class SQLPreviewStore(PreviewStoreInterface, LoggerMixin):
    """Preview session store backed by SQLite through aiosqlite."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        database_path: Optional[str] = None,
        echo: bool = False,
    ):
        """Initialize the store.

        Args:
            database_url: Full async database URL. If provided, overrides database_path.
            database_path: Path to SQLite database file. Defaults to user data directory.
            echo: Whether to echo SQL statements for debugging.
        """
        if database_url:
            self.database_url = database_url
        else:
            if database_path:
                path = Path(database_path)
            else:
                path = Path.home() / ".abtest_admin" / "preview.db"
            path.parent.mkdir(parents=True, exist_ok=True)
            self.database_url = f"sqlite+aiosqlite:///{path.absolute()}"

        self.echo = echo
        self._engine = None
        self._async_session = None
        self._initialized = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "SQLPreviewStore":
        """Store at the configured database URL, or the default file under the data directory."""
        if settings.storage.url:
            return cls(database_url=settings.storage.url, echo=settings.storage.echo)
        return cls(database_path=str(settings.get_database_path()), echo=settings.storage.echo)

    async def initialize(self) -> None:
        """Create the engine and tables."""
        if self._initialized:
            return

        self._engine = create_async_engine(self.database_url, echo=self.echo)

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self._async_session = sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        self._initialized = True
        self.logger.debug("Preview store initialized", database_url=self.database_url)

    async def close(self) -> None:
        if self._engine:
            await self._engine.dispose()
        self._initialized = False

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    async def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        await self._ensure_initialized()

        async with self._async_session() as session:
            model = await session.get(PreviewSessionModel, session_id)
            return model.to_dict() if model else None

    async def save(self, session_id: str, data: Dict[str, Any]) -> None:
        await self._ensure_initialized()

        async with self._async_session() as session:
            await session.merge(PreviewSessionModel.from_dict(session_id, data))
            await session.commit()

    async def clear(self, session_id: str) -> None:
        await self._ensure_initialized()

        async with self._async_session() as session:
            await session.execute(
                delete(PreviewSessionModel).where(PreviewSessionModel.session_id == session_id)
            )
            await session.commit()
