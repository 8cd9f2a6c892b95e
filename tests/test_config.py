"""Tests for configuration management."""

import pytest
from unittest.mock import patch

import yaml
from pydantic import ValidationError

from jsonsink.config import (
    Config,
    LoggingConfig,
    ReporterConfig,
    ReporterState,
    RequestMethod,
    get_default_config,
    get_hostname,
    load_config,
    resolve_hostname,
    resolve_state,
    save_config,
    set_config_value,
)


class TestReporterConfig:
    """Tests for ReporterConfig defaults and coercion."""

    def test_defaults(self):
        """Test default option values."""
        config = ReporterConfig()
        assert config.sink_url == "http://localhost:8000"
        assert config.request_type is RequestMethod.PUT
        assert config.hostname == "auto"
        assert config.headers == {}
        assert config.timeout is None

    @pytest.mark.parametrize("value", ["post", "POST", "Post", " post ", RequestMethod.POST])
    def test_post_variants(self, value):
        """Test every spelling of post selects POST."""
        config = ReporterConfig(request_type=value)
        assert config.request_type is RequestMethod.POST

    @pytest.mark.parametrize("value", ["put", "PUT", "get", "delete", "", None, 42, ["post"]])
    def test_other_values_coerce_to_put(self, value):
        """Test unrecognized request types fall back to PUT without error."""
        config = ReporterConfig(request_type=value)
        assert config.request_type is RequestMethod.PUT

    def test_legacy_option_names(self):
        """Test json_sink_url and json_http_request_type are accepted."""
        config = ReporterConfig(**{
            "json_sink_url": "http://other:9000",
            "json_http_request_type": "post",
        })
        assert config.sink_url == "http://other:9000"
        assert config.request_type is RequestMethod.POST

    def test_unknown_options_ignored(self):
        """Test options meant for other reporters are ignored."""
        config = ReporterConfig(**{"sink_url": "http://a:1", "report_bulk": True})
        assert config.sink_url == "http://a:1"

    def test_timeout_must_be_positive(self):
        """Test non-positive timeout raises ValidationError."""
        with pytest.raises(ValidationError):
            ReporterConfig(timeout=0)


class TestResolveState:
    """Tests for state resolution."""

    def test_auto_hostname_uses_local_hostname(self):
        """Test "auto" resolves to the system hostname."""
        with patch("jsonsink.config.socket.gethostname", return_value="box-1"):
            state = resolve_state(ReporterConfig())
        assert state.hostname == "box-1"

    def test_literal_hostname_kept(self):
        """Test a literal hostname is used verbatim."""
        with patch("jsonsink.config.socket.gethostname") as mock_gethostname:
            state = resolve_state(ReporterConfig(hostname="h1"))
        assert state.hostname == "h1"
        mock_gethostname.assert_not_called()

    def test_auto_matches_get_hostname(self):
        """Test "auto" yields the same value as get_hostname()."""
        assert resolve_hostname("auto") == get_hostname()

    def test_state_fields(self):
        """Test state carries the resolved options."""
        config = ReporterConfig(
            sink_url="http://sink:1234",
            request_type="post",
            hostname="h1",
            headers={"X-Token": "t"},
            timeout=2.5,
        )
        state = resolve_state(config)
        assert state.sink_url == "http://sink:1234"
        assert state.request_method is RequestMethod.POST
        assert dict(state.headers) == {"X-Token": "t"}
        assert state.timeout == 2.5

    def test_state_is_frozen(self):
        """Test state cannot be reassigned."""
        state = resolve_state(ReporterConfig(hostname="h1"))
        with pytest.raises(ValidationError):
            state.hostname = "h2"

    def test_state_headers_are_read_only(self):
        """Test headers cannot be changed through the state."""
        config = ReporterConfig(hostname="h1", headers={"X-Token": "t"})
        state = resolve_state(config)

        with pytest.raises(TypeError):
            state.headers["x"] = "y"
        with pytest.raises(AttributeError):
            state.headers.append(("x", "y"))
        assert state.headers == (("X-Token", "t"),)

    def test_state_detached_from_config_headers(self):
        """Test later changes to the options do not reach the state."""
        config = ReporterConfig(hostname="h1", headers={"X-Token": "t"})
        state = resolve_state(config)

        config.headers["X-Other"] = "o"

        assert dict(state.headers) == {"X-Token": "t"}

    def test_get_hostname_failure_returns_unknown(self):
        """Test hostname lookup failure does not raise."""
        with patch("jsonsink.config.socket.gethostname", side_effect=OSError("boom")):
            assert get_hostname() == "unknown"


class TestLoggingConfig:
    """Tests for LoggingConfig validation."""

    def test_lowercase_log_level_normalized(self):
        """Test lowercase log level is normalized to uppercase."""
        config = LoggingConfig(level="debug")
        assert config.level == "DEBUG"

    def test_invalid_log_level_raises_error(self):
        """Test invalid log level raises ValidationError."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="INFOO")

    def test_file_defaults_to_none(self):
        """Test no log file by default."""
        assert LoggingConfig().file is None


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_nonexistent_file_returns_defaults(self, tmp_path):
        """Test loading nonexistent file returns defaults."""
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config.reporter.sink_url == "http://localhost:8000"

    def test_load_valid_config(self, tmp_path):
        """Test loading valid config file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({
            "reporter": {"sink_url": "http://test.com/sink", "request_type": "post"},
            "logging": {"level": "debug"},
        }))

        config = load_config(config_path)
        assert config.reporter.sink_url == "http://test.com/sink"
        assert config.reporter.request_type is RequestMethod.POST
        assert config.logging.level == "DEBUG"

    def test_load_partial_config(self, tmp_path):
        """Test loading partial config merges with defaults."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"reporter": {"hostname": "h1"}}))

        config = load_config(config_path)
        assert config.reporter.sink_url == "http://localhost:8000"
        assert config.reporter.hostname == "h1"

    def test_load_invalid_yaml_returns_defaults(self, tmp_path):
        """Test loading invalid YAML returns defaults."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("invalid: yaml: content: [")

        config = load_config(config_path)
        assert config == get_default_config()

    def test_load_invalid_values_returns_defaults(self, tmp_path):
        """Test loading invalid values returns defaults."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"logging": {"level": "LOUD"}}))

        config = load_config(config_path)
        assert config.logging.level == "INFO"

    def test_load_empty_file_returns_defaults(self, tmp_path):
        """Test loading empty file returns defaults."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("")

        config = load_config(config_path)
        assert config == get_default_config()


class TestSaveConfig:
    """Tests for save_config function."""

    def test_save_config(self, tmp_path):
        """Test saving configuration."""
        config_path = tmp_path / "config.yaml"
        config = Config(reporter=ReporterConfig(sink_url="http://test.com", request_type="post"))

        save_config(config, config_path)

        loaded = yaml.safe_load(config_path.read_text())
        assert loaded["reporter"]["sink_url"] == "http://test.com"
        assert loaded["reporter"]["request_type"] == "POST"

    def test_save_creates_directory(self, tmp_path):
        """Test save creates parent directory."""
        config_path = tmp_path / "subdir" / "config.yaml"

        save_config(Config(), config_path)

        assert config_path.exists()

    def test_save_then_load_round_trip(self, tmp_path):
        """Test a saved config loads back unchanged."""
        config_path = tmp_path / "config.yaml"
        config = Config(reporter=ReporterConfig(hostname="h1", timeout=3))

        save_config(config, config_path)

        assert load_config(config_path) == config


class TestSetConfigValue:
    """Tests for set_config_value function."""

    def test_set_sink_url(self, tmp_path):
        """Test setting sink URL."""
        config_path = tmp_path / "config.yaml"
        save_config(Config(), config_path)

        config = set_config_value("reporter.sink_url", "http://new.com", config_path)
        assert config.reporter.sink_url == "http://new.com"

    def test_set_request_type_coerces(self, tmp_path):
        """Test unknown request type is stored as PUT."""
        config_path = tmp_path / "config.yaml"
        save_config(Config(), config_path)

        config = set_config_value("reporter.request_type", "patch", config_path)
        assert config.reporter.request_type is RequestMethod.PUT

        config = set_config_value("reporter.request_type", "post", config_path)
        assert config.reporter.request_type is RequestMethod.POST

    def test_set_and_clear_timeout(self, tmp_path):
        """Test setting then clearing the timeout."""
        config_path = tmp_path / "config.yaml"
        save_config(Config(), config_path)

        config = set_config_value("reporter.timeout", "2.5", config_path)
        assert config.reporter.timeout == 2.5

        config = set_config_value("reporter.timeout", "", config_path)
        assert config.reporter.timeout is None

    def test_set_invalid_level_raises_error(self, tmp_path):
        """Test invalid log level raises ValueError and leaves the file alone."""
        config_path = tmp_path / "config.yaml"
        save_config(Config(), config_path)

        with pytest.raises(ValueError, match="Invalid value"):
            set_config_value("logging.level", "LOUD", config_path)
        assert load_config(config_path).logging.level == "INFO"

    def test_set_unknown_key_raises_error(self, tmp_path):
        """Test setting unknown key raises ValueError."""
        config_path = tmp_path / "config.yaml"
        save_config(Config(), config_path)

        with pytest.raises(ValueError, match="Unknown configuration key"):
            set_config_value("unknown.key", "value", config_path)

    def test_set_persists_to_file(self, tmp_path):
        """Test set_config_value persists changes to file."""
        config_path = tmp_path / "config.yaml"
        save_config(Config(), config_path)

        set_config_value("reporter.hostname", "h9", config_path)

        reloaded = load_config(config_path)
        assert reloaded.reporter.hostname == "h9"
