"""
Tests for conversation storage (memory and SQLite).
"""

import pytest

from chatty.memory import ConversationStore, generate_conversation_id


def make_messages(count: int):
    return [
        {"sender": "user" if i % 2 == 0 else "bot", "text": f"message {i}", "timestamp": f"2024-01-01T00:00:{i:02d}.000Z"}
        for i in range(count)
    ]


class TestConversationIds:
    """Test id generation"""

    def test_id_format(self):
        """Test ids are conv_ followed by 16 alphanumerics"""
        conversation_id = generate_conversation_id()

        assert conversation_id.startswith("conv_")
        suffix = conversation_id[len("conv_"):]
        assert len(suffix) == 16
        assert suffix.isalnum()

    def test_ids_differ(self):
        """Test consecutive ids are not repeated"""
        assert len({generate_conversation_id() for _ in range(50)}) == 50


class TestMemoryStore:
    """Test the in-memory mode"""

    @pytest.mark.asyncio
    async def test_sliding_window(self):
        """Test only the most recent 20 messages are kept, in order"""
        store = ConversationStore(db_path="", max_messages=20)
        await store.async_init()
        messages = make_messages(25)

        await store.set("conv_a", messages)

        stored = await store.get("conv_a")
        assert len(stored) == 20
        assert stored == messages[5:]

    @pytest.mark.asyncio
    async def test_unknown_conversation_is_empty(self):
        """Test unknown ids read as empty history"""
        store = ConversationStore(db_path="")

        assert await store.get("conv_missing") == []

    @pytest.mark.asyncio
    async def test_summaries_newest_first(self):
        """Test get_all lists summaries ordered by last update"""
        store = ConversationStore(db_path="")
        await store.set("conv_old", make_messages(2), title="Old Chat")
        await store.set("conv_new", make_messages(3), title="New Chat")

        summaries = await store.get_all()

        assert [s["id"] for s in summaries][0] == "conv_new"
        assert summaries[0]["title"] == "New Chat"
        assert summaries[0]["lastMessage"] == "message 2"
        assert summaries[0]["messageCount"] == 3
        assert await store.size() == 2

    @pytest.mark.asyncio
    async def test_title_is_kept_on_update(self):
        """Test later writes without a title keep the existing one"""
        store = ConversationStore(db_path="")
        await store.set("conv_a", [], title="Let's Chat")
        await store.set("conv_a", make_messages(2))

        record = await store.get_conversation("conv_a")

        assert record["title"] == "Let's Chat"
        assert len(record["messages"]) == 2

    @pytest.mark.asyncio
    async def test_delete_and_clear(self):
        """Test delete reports existence and clear empties the store"""
        store = ConversationStore(db_path="")
        await store.set("conv_a", make_messages(1))
        await store.set("conv_b", make_messages(1))

        assert await store.delete("conv_a") is True
        assert await store.delete("conv_a") is False
        assert await store.clear() is True
        assert await store.size() == 0

    @pytest.mark.asyncio
    async def test_storage_status(self):
        """Test memory-only stores report no database"""
        store = ConversationStore(db_path="")
        await store.async_init()
        await store.set("conv_a", [])

        status = await store.get_storage_status()

        assert status["databaseAvailable"] is False
        assert status["databasePath"] is None
        assert status["memoryConversations"] == 1


class TestSqliteStore:
    """Test persistence through aiosqlite"""

    @pytest.mark.asyncio
    async def test_round_trip_across_instances(self, tmp_path):
        """Test persisted conversations survive a new store instance with the window applied"""
        db_path = str(tmp_path / "conversations.db")
        messages = make_messages(25)

        writer = ConversationStore(db_path=db_path, max_messages=20)
        await writer.async_init()
        await writer.set("conv_a", messages, title="Persisted")
        await writer.close()

        reader = ConversationStore(db_path=db_path, max_messages=20)
        await reader.async_init()
        try:
            stored = await reader.get("conv_a")
            summaries = await reader.get_all()
            status = await reader.get_storage_status()
        finally:
            await reader.close()

        assert stored == messages[5:]
        assert summaries[0]["title"] == "Persisted"
        assert status["databaseAvailable"] is True
        assert status["databasePath"] == db_path

    @pytest.mark.asyncio
    async def test_delete_removes_rows(self, tmp_path):
        """Test deleted conversations do not come back from the database"""
        db_path = str(tmp_path / "conversations.db")
        store = ConversationStore(db_path=db_path)
        await store.async_init()
        await store.set("conv_a", make_messages(2))
        await store.delete("conv_a")
        await store.close()

        reopened = ConversationStore(db_path=db_path)
        await reopened.async_init()
        try:
            assert await reopened.get("conv_a") == []
            assert await reopened.size() == 0
        finally:
            await reopened.close()

    @pytest.mark.asyncio
    async def test_unusable_path_falls_back_to_memory(self, tmp_path):
        """Test an unusable database path keeps the store working in memory"""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way")
        store = ConversationStore(db_path=str(blocker / "conversations.db"))
        await store.async_init()

        await store.set("conv_a", make_messages(2))

        assert len(await store.get("conv_a")) == 2
        assert (await store.get_storage_status())["databaseAvailable"] is False
