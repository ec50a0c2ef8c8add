"""
Unit Tests for Configuration Management.

Black box tests against the public interface of config.py.
Filesystem scenarios use tmp_path to create controlled project roots.
"""

import pytest
from pydantic import ValidationError

from cloudlink.core.config import (
    AppConfig,
    CloudLinkClientConfig,
    find_project_root,
    get_app_config,
    get_client_config,
    get_settings,
    load_yaml_config,
    normalize_hostname,
)
from cloudlink.core.config_schema import CloudLinkSchema
from cloudlink.core.exceptions import ConfigurationError

LOGGING_YAML = """\
level: INFO
format: json
handlers:
  console:
    enabled: true
  file:
    enabled: false
    path: logs/system.jsonl
    max_bytes: 1048576
    backup_count: 2
"""


@pytest.fixture(autouse=True)
def _clear_config_cache(monkeypatch):
    """Clear lru_cache between tests so each test gets a fresh load."""
    monkeypatch.delenv("CLOUDLINK_SERVER_KEY", raising=False)
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


@pytest.fixture
def project_root(tmp_path, monkeypatch):
    """A project root with cloudlink.yaml, logging.yaml and .env."""
    (tmp_path / ".project_root").touch()
    settings_dir = tmp_path / "config" / "settings"
    settings_dir.mkdir(parents=True)
    (settings_dir / "cloudlink.yaml").write_text(
        "hostname: cloud.example.com\nlog_level: info\ntimeout: 12.5\n"
    )
    (settings_dir / "logging.yaml").write_text(LOGGING_YAML)
    (tmp_path / "config" / ".env").write_text("CLOUDLINK_SERVER_KEY=from-env-file\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


# =============================================================================
# find_project_root / load_yaml_config
# =============================================================================


class TestFindProjectRoot:
    """Tests for .project_root marker discovery."""

    def test_finds_root_from_subdirectory(self, project_root, monkeypatch):
        nested = project_root / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert find_project_root() == project_root

    def test_raises_when_no_marker_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(RuntimeError, match="Project root not found"):
            find_project_root()


class TestLoadYamlConfig:
    """Tests for YAML file loading from config/settings/."""

    def test_loads_yaml_as_dict(self, project_root):
        data = load_yaml_config("cloudlink.yaml")
        assert data["hostname"] == "cloud.example.com"

    def test_raises_for_nonexistent_file(self, project_root):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_yaml_config("does_not_exist.yaml")

    def test_returns_empty_dict_for_empty_yaml(self, project_root):
        (project_root / "config" / "settings" / "empty.yaml").write_text("")
        assert load_yaml_config("empty.yaml") == {}


# =============================================================================
# CloudLinkClientConfig
# =============================================================================


class TestNormalizeHostname:
    """Tests for protocol prefixing."""

    @pytest.mark.parametrize(
        ("hostname", "expected"),
        [
            ("cloud.example.com", "https://cloud.example.com"),
            ("http://localhost:8080", "http://localhost:8080"),
            ("https://cloud.example.com/", "https://cloud.example.com"),
            ("HTTPS://cloud.example.com", "HTTPS://cloud.example.com"),
            ("httpbin.org", "https://httpbin.org"),
            ("  cloud.example.com  ", "https://cloud.example.com"),
        ],
    )
    def test_normalize(self, hostname, expected):
        assert normalize_hostname(hostname) == expected


class TestCloudLinkClientConfig:
    """Tests for the immutable client configuration."""

    def test_defaults(self):
        config = CloudLinkClientConfig(hostname="h", server_key="k")
        assert config.log_level == "WARNING"
        assert config.timeout == 30.0

    def test_base_url(self):
        config = CloudLinkClientConfig(hostname="cloud.example.com", server_key="k")
        assert config.base_url == "https://cloud.example.com/3"

    def test_is_frozen(self):
        config = CloudLinkClientConfig(hostname="h", server_key="k")
        with pytest.raises(ValidationError):
            config.hostname = "other"

    def test_log_level_is_normalized(self):
        assert CloudLinkClientConfig(hostname="h", server_key="k", log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_is_rejected(self):
        with pytest.raises(ValidationError, match="Unknown log level"):
            CloudLinkClientConfig(hostname="h", server_key="k", log_level="LOUD")

    @pytest.mark.parametrize("field", ["hostname", "server_key"])
    def test_required_fields_may_not_be_empty(self, field):
        values = {"hostname": "h", "server_key": "k", field: ""}
        with pytest.raises(ValidationError):
            CloudLinkClientConfig(**values)

    def test_server_key_not_in_repr(self):
        assert "top-secret" not in repr(CloudLinkClientConfig(hostname="h", server_key="top-secret"))

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            CloudLinkClientConfig(hostname="h", server_key="k", retries=3)


# =============================================================================
# File-based loading
# =============================================================================


class TestAppConfig:
    """Tests for YAML loading through AppConfig."""

    def test_loads_schemas(self, project_root):
        config = get_app_config()
        assert isinstance(config, AppConfig)
        assert isinstance(config.cloudlink, CloudLinkSchema)
        assert config.cloudlink.log_level == "INFO"

    def test_unknown_key_raises_configuration_error(self, project_root):
        (project_root / "config" / "settings" / "cloudlink.yaml").write_text(
            "hostname: h\nretries: 3\n"
        )
        with pytest.raises(ConfigurationError, match="cloudlink.yaml"):
            AppConfig()


class TestGetClientConfig:
    """Tests for assembling a client configuration from files."""

    def test_from_files(self, project_root):
        config = get_client_config()

        assert config.hostname == "cloud.example.com"
        assert config.server_key == "from-env-file"
        assert config.log_level == "INFO"
        assert config.timeout == 12.5

    def test_logging_yaml_is_not_needed(self, project_root):
        (project_root / "config" / "settings" / "logging.yaml").unlink()

        assert get_client_config().hostname == "cloud.example.com"

    def test_environment_overrides_env_file(self, project_root, monkeypatch):
        monkeypatch.setenv("CLOUDLINK_SERVER_KEY", "from-environment")
        assert get_client_config().server_key == "from-environment"

    def test_overrides_win(self, project_root):
        config = get_client_config(server_key="explicit", log_level="DEBUG", timeout=None)

        assert config.server_key == "explicit"
        assert config.log_level == "DEBUG"
        assert config.timeout == 12.5

    def test_no_files_needed_when_everything_is_given(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = get_client_config(hostname="h", server_key="k")

        assert config.base_url == "https://h/3"
        assert config.log_level == "WARNING"

    def test_missing_hostname_without_files(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError, match="No hostname given"):
            get_client_config(server_key="k")

    def test_missing_server_key(self, project_root):
        (project_root / "config" / ".env").write_text("")
        with pytest.raises(ConfigurationError, match="CLOUDLINK_SERVER_KEY"):
            get_client_config()

    def test_invalid_override(self, project_root):
        with pytest.raises(ConfigurationError):
            get_client_config(timeout=-1)
