"""
日志配置测试
测试loguru环境预设和绑定日志器
"""
import pytest
from loguru import logger

from config.loguru_config import LoguruConfig, get_logger, setup_logging
from config.settings import Settings, get_settings


@pytest.fixture
def restore_logging():
    """测试结束后恢复测试日志配置"""
    yield
    get_settings.cache_clear()
    setup_logging("testing")


class TestLoguruConfig:
    """日志配置测试"""

    def test_testing_preset_is_console_only(self, restore_logging, temp_dir):
        """测试测试环境不写日志文件"""
        config = LoguruConfig()
        config.configure_testing_logging()

        assert config.is_configured()
        assert not any(temp_dir.iterdir())

    def test_file_logging_creates_directory(self, restore_logging, temp_dir):
        """测试文件日志创建目录"""
        log_dir = temp_dir / "logs"
        config = LoguruConfig()
        config.remove_default_handlers()
        config.configure_file_logging(log_dir, enqueue=False)

        logger.info("storage toolkit started")

        assert log_dir.is_dir()
        assert (log_dir / "storage.log").exists()

    def test_remove_default_handlers_resets_state(self, restore_logging):
        """测试移除处理器后未配置"""
        config = LoguruConfig()
        config.configure_testing_logging()
        config.remove_default_handlers()
        assert not config.is_configured()

    def test_get_logger_binds_name(self):
        """测试日志器绑定模块名"""
        records = []
        handler_id = logger.add(records.append, level="DEBUG", format="{message}")
        try:
            get_logger("storage.tests", request_id="r-1").debug("bound")
        finally:
            logger.remove(handler_id)

        extra = records[0].record["extra"]
        assert extra["logger_name"] == "storage.tests"
        assert extra["request_id"] == "r-1"

    def test_setup_logging_production(self, restore_logging, temp_dir):
        """测试生产环境写入日志文件"""
        setup_logging("production", temp_dir)
        assert (temp_dir / "storage.log").exists()

    def test_setup_logging_reads_settings(self, restore_logging, temp_dir, monkeypatch):
        """测试未传参数时从环境变量读取环境和日志目录"""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_DIR", str(temp_dir / "from-env"))
        get_settings.cache_clear()

        setup_logging()

        assert (temp_dir / "from-env" / "storage.log").exists()

    def test_log_level_overrides_preset(self, restore_logging, capsys):
        """测试日志级别覆盖预设级别"""
        setup_logging("testing", level="debug")
        logger.debug("debug visible")

        assert "debug visible" in capsys.readouterr().err

    def test_log_level_from_settings(self, restore_logging, capsys, monkeypatch):
        """测试LOG_LEVEL环境变量覆盖预设级别"""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        get_settings.cache_clear()

        setup_logging("testing")
        logger.warning("warning hidden")
        logger.error("error visible")

        err = capsys.readouterr().err
        assert "warning hidden" not in err
        assert "error visible" in err


class TestSettings:
    """基础设置测试"""

    def test_defaults(self, monkeypatch):
        """测试默认值"""
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_DIR", raising=False)

        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.log_level is None
        assert str(settings.log_dir) == "logs"

    def test_get_settings_is_cached(self):
        """测试设置实例被缓存"""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
