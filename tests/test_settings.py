"""
Tests for configuration and logging setup.
"""

from pathlib import Path

from loguru import logger

from chatty.config.settings import PROJECT_ROOT, Settings
from chatty.utils.logger import setup_logger


class TestSettings:
    """Test Settings defaults and derived values"""

    def test_memory_only_path(self):
        """Test an empty database path disables persistence"""
        assert Settings(conversation_db_path="").conversation_db_path_resolved == ""

    def test_relative_path_is_project_relative(self):
        """Test relative database paths resolve under the project root"""
        resolved = Settings(conversation_db_path="data/test.db").conversation_db_path_resolved

        assert Path(resolved) == PROJECT_ROOT / "data" / "test.db"

    def test_absolute_path_is_kept(self, tmp_path):
        """Test absolute database paths are used as given"""
        target = tmp_path / "chat.db"

        assert Settings(conversation_db_path=str(target)).conversation_db_path_resolved == str(target)

    def test_env_override(self, monkeypatch):
        """Test environment variables override defaults"""
        monkeypatch.setenv("WEB_SEARCH_PROVIDER", "brave")
        monkeypatch.setenv("MAX_CONVERSATION_MESSAGES", "8")

        settings = Settings()

        assert settings.web_search_provider == "brave"
        assert settings.max_conversation_messages == 8


def test_setup_logger_writes_file(tmp_path):
    """Test the rotating file sink is created in the requested directory"""
    setup_logger(level="DEBUG", log_dir=tmp_path, log_to_file=True)
    logger.info("file sink check")
    logger.complete()

    log_file = tmp_path / "app.log"
    assert log_file.exists()
    assert "file sink check" in log_file.read_text()
    setup_logger(level="INFO", log_to_file=False)
