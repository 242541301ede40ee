"""
Conversation store - message history per conversation id.

Provides:
- In-memory conversation map (always written first)
- Optional SQLite persistence through aiosqlite with WAL mode
- Cached database availability check with fallback to memory
- Sliding window of the most recent messages per conversation
"""

import base64
import hashlib
import secrets
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import aiosqlite
from loguru import logger

from chatty.config.constants import DEFAULT_CONVERSATION_TITLE, MESSAGES
from chatty.config.settings import settings
from chatty.utils.clock import utc_now_iso
from chatty.utils.errors import StorageError


def generate_conversation_id() -> str:
    """``conv_`` plus 16 alphanumerics from a time+randomness digest."""
    seed = f"{time.time_ns()}-{secrets.token_hex(16)}".encode()
    digest = base64.b64encode(hashlib.sha256(seed).digest()).decode()
    return "conv_" + "".join(c for c in digest if c.isalnum())[:16]


_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS conversations (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS messages (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        conversation_id TEXT NOT NULL,
        sender TEXT NOT NULL,
        text TEXT NOT NULL,
        timestamp TEXT NOT NULL,
        FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id, id)",
]


class ConversationStore:
    """Conversation storage with memory-first writes and optional SQLite persistence"""

    def __init__(
        self,
        db_path: Optional[str] = None,
        max_messages: Optional[int] = None,
        check_interval: Optional[float] = None
    ):
        """
        Initialize the store

        Args:
            db_path: SQLite path ("" for memory only, defaults to settings.conversation_db_path_resolved)
            max_messages: Messages kept per conversation (oldest dropped first)
            check_interval: Seconds a database availability check stays valid
        """
        if db_path is None:
            db_path = settings.conversation_db_path_resolved
        self.db_path: Optional[Path] = Path(db_path) if db_path else None
        self.max_messages = max_messages or settings.max_conversation_messages
        self.check_interval = (
            check_interval if check_interval is not None else settings.storage_check_interval_seconds
        )

        self._conversations: Dict[str, Dict[str, Any]] = {}
        self._conn: Optional[aiosqlite.Connection] = None
        self._initialized = False
        # (monotonic checked_at, available, wall-clock ISO of the check)
        self._db_state: Tuple[Optional[float], bool, Optional[str]] = (None, False, None)

    async def async_init(self):
        """Open the SQLite connection and create tables - call this from lifespan startup"""
        if self._initialized:
            return
        self._initialized = True

        if self.db_path is None:
            logger.info("Conversation store running in memory-only mode")
            return

        try:
            await self._connect()
            logger.info(f"Initialized conversation database at {self.db_path}")
        except Exception as e:
            logger.warning(f"⚠️  {MESSAGES.DATABASE_CONNECTION_FAILED}, using memory storage: {e}")
            self._db_state = (time.monotonic(), False, utc_now_iso())

    async def _connect(self):
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(self.db_path), timeout=10.0)
        try:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA synchronous=NORMAL")
            await conn.execute("PRAGMA busy_timeout=5000")
            await conn.execute("PRAGMA foreign_keys=ON")
            for statement in _SCHEMA:
                await conn.execute(statement)
            await conn.commit()
        except Exception:
            await conn.close()
            raise
        self._conn = conn
        self._db_state = (time.monotonic(), True, utc_now_iso())

    async def _database_available(self) -> bool:
        """Cached connectivity check; reconnects once the cache expires."""
        if self.db_path is None or not self._initialized:
            return False

        checked_at, available, _ = self._db_state
        if checked_at is not None and time.monotonic() - checked_at < self.check_interval:
            return available

        try:
            if self._conn is None:
                await self._connect()
            else:
                await self._conn.execute("SELECT 1")
            available = True
        except Exception as e:
            logger.warning(f"Conversation database check failed: {e}")
            available = False

        self._db_state = (time.monotonic(), available, utc_now_iso())
        return available

    def _mark_database_failed(self):
        self._db_state = (time.monotonic(), False, utc_now_iso())

    # ------------------------------------------------------------------
    # Database helpers
    # ------------------------------------------------------------------

    async def _db_load(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        async with self._conn.execute(
            "SELECT title, created_at, updated_at FROM conversations WHERE id = ?",
            (conversation_id,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None

        async with self._conn.execute(
            "SELECT sender, text, timestamp FROM messages WHERE conversation_id = ? ORDER BY id",
            (conversation_id,)
        ) as cursor:
            rows = await cursor.fetchall()

        return {
            "title": row[0],
            "messages": [{"sender": r[0], "text": r[1], "timestamp": r[2]} for r in rows],
            "createdAt": row[1],
            "updatedAt": row[2],
        }

    async def _db_save(self, conversation_id: str, record: Dict[str, Any]):
        try:
            await self._conn.execute(
                """
                INSERT INTO conversations (id, title, created_at, updated_at) VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET title = excluded.title, updated_at = excluded.updated_at
                """,
                (conversation_id, record["title"], record["createdAt"], record["updatedAt"])
            )
            await self._conn.execute("DELETE FROM messages WHERE conversation_id = ?", (conversation_id,))
            await self._conn.executemany(
                "INSERT INTO messages (conversation_id, sender, text, timestamp) VALUES (?, ?, ?, ?)",
                [
                    (conversation_id, m.get("sender", ""), m.get("text", ""), m.get("timestamp", ""))
                    for m in record["messages"]
                ]
            )
            await self._conn.commit()
        except Exception as e:
            await self._conn.rollback()
            raise StorageError(f"Failed to save conversation {conversation_id}: {e}") from e

    async def _db_ids(self) -> List[str]:
        async with self._conn.execute("SELECT id FROM conversations") as cursor:
            return [row[0] for row in await cursor.fetchall()]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(self, conversation_id: str) -> List[Dict[str, Any]]:
        """Messages of a conversation, oldest first ([] when unknown)."""
        record = self._conversations.get(conversation_id)
        if record is None and await self._database_available():
            try:
                record = await self._db_load(conversation_id)
                if record is not None:
                    self._conversations[conversation_id] = record
            except Exception as e:
                logger.error(f"Failed to load conversation {conversation_id} from database: {e}")
                self._mark_database_failed()
        return list(record["messages"]) if record else []

    async def get_conversation(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        """Full record ``{title, messages, createdAt, updatedAt}`` or None."""
        await self.get(conversation_id)
        record = self._conversations.get(conversation_id)
        return dict(record) if record else None

    async def set(
        self,
        conversation_id: str,
        messages: List[Dict[str, Any]],
        title: Optional[str] = None
    ):
        """Store messages (keeping the most recent ``max_messages``); never raises."""
        now = utc_now_iso()
        existing = self._conversations.get(conversation_id) or {}
        record = {
            "title": title or existing.get("title") or DEFAULT_CONVERSATION_TITLE,
            "messages": list(messages)[-self.max_messages:],
            "createdAt": existing.get("createdAt") or now,
            "updatedAt": now,
        }
        # Re-insert so insertion order tracks recency
        self._conversations.pop(conversation_id, None)
        self._conversations[conversation_id] = record

        if not await self._database_available():
            return
        try:
            await self._db_save(conversation_id, record)
        except Exception as e:
            logger.error(f"Error saving conversation, kept in memory only: {e}")
            self._mark_database_failed()

    async def delete(self, conversation_id: str) -> bool:
        """Remove a conversation; returns whether it existed."""
        existed = self._conversations.pop(conversation_id, None) is not None

        if await self._database_available():
            try:
                cursor = await self._conn.execute("DELETE FROM conversations WHERE id = ?", (conversation_id,))
                await self._conn.execute("DELETE FROM messages WHERE conversation_id = ?", (conversation_id,))
                await self._conn.commit()
                existed = existed or cursor.rowcount > 0
            except Exception as e:
                logger.error(f"Error deleting conversation {conversation_id}: {e}")
                self._mark_database_failed()
        return existed

    async def clear(self) -> bool:
        self._conversations.clear()

        if await self._database_available():
            try:
                await self._conn.execute("DELETE FROM messages")
                await self._conn.execute("DELETE FROM conversations")
                await self._conn.commit()
            except Exception as e:
                logger.error(f"Error clearing conversations: {e}")
                self._mark_database_failed()
                return False
        return True

    async def size(self) -> int:
        if await self._database_available():
            try:
                return len(set(self._conversations) | set(await self._db_ids()))
            except Exception as e:
                logger.error(f"Error counting conversations: {e}")
                self._mark_database_failed()
        return len(self._conversations)

    async def get_all(self) -> List[Dict[str, Any]]:
        """Conversation summaries, most recently updated first."""
        if await self._database_available():
            try:
                for conversation_id in await self._db_ids():
                    if conversation_id not in self._conversations:
                        record = await self._db_load(conversation_id)
                        if record is not None:
                            self._conversations[conversation_id] = record
            except Exception as e:
                logger.error(f"Error listing conversations from database: {e}")
                self._mark_database_failed()

        summaries = []
        for conversation_id, record in reversed(list(self._conversations.items())):
            messages = record["messages"]
            summaries.append({
                "id": conversation_id,
                "title": record["title"],
                "lastMessage": messages[-1]["text"] if messages else None,
                "updatedAt": record["updatedAt"],
                "messageCount": len(messages),
            })
        summaries.sort(key=lambda s: s["updatedAt"], reverse=True)
        return summaries

    async def get_storage_status(self) -> Dict[str, Any]:
        available = await self._database_available()
        return {
            "databaseAvailable": available,
            "databasePath": str(self.db_path) if self.db_path else None,
            "memoryConversations": len(self._conversations),
            "lastDatabaseCheck": self._db_state[2],
        }

    def new_conversation_id(self) -> str:
        return generate_conversation_id()

    async def close(self):
        """Close the aiosqlite connection"""
        if self._conn:
            try:
                await self._conn.close()
                logger.debug("Closed conversation database connection")
            except Exception as e:
                logger.warning(f"Error closing conversation database: {e}")
            finally:
                self._conn = None
