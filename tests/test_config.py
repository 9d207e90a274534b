"""Tests for dhc.config — YAML configuration loading."""

import textwrap

import pytest

from dhc.config import ConfigError, DhcConfig, load_config, validate_config


class TestDhcConfigDefaults:
    """DhcConfig should provide sensible defaults for every field."""

    def test_timeout_default(self) -> None:
        assert DhcConfig().timeout_ms == 5000

    def test_port_default(self) -> None:
        assert DhcConfig().port == 443

    def test_workers_default_is_sequential(self) -> None:
        assert DhcConfig().workers == 1

    def test_output_defaults(self) -> None:
        cfg = DhcConfig()
        assert cfg.output_format == "table"
        assert cfg.show_fastest is True


class TestLoadConfigExplicitPath:
    """load_config(path=...) with an explicit file path."""

    def test_full_config(self, tmp_path: pytest.TempPathFactory) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(
            textwrap.dedent("""\
                timeout_ms: 2000
                port: 8443
                workers: 8
                format: json
                show_fastest: false
            """),
            encoding="utf-8",
        )

        cfg = load_config(cfg_file)

        assert cfg.timeout_ms == 2000
        assert cfg.port == 8443
        assert cfg.workers == 8
        assert cfg.output_format == "json"
        assert cfg.show_fastest is False

    def test_partial_config_uses_defaults(
        self, tmp_path: pytest.TempPathFactory
    ) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("timeout_ms: 1500\n", encoding="utf-8")

        cfg = load_config(cfg_file)

        assert cfg.timeout_ms == 1500
        # Remaining fields keep their defaults.
        assert cfg.port == 443
        assert cfg.workers == 1
        assert cfg.output_format == "table"

    def test_empty_file_returns_defaults(
        self, tmp_path: pytest.TempPathFactory
    ) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("", encoding="utf-8")

        assert load_config(cfg_file) == DhcConfig()

    def test_unknown_keys_are_ignored(self, tmp_path: pytest.TempPathFactory) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(
            textwrap.dedent("""\
                workers: 4
                retries: 3
                cache: true
            """),
            encoding="utf-8",
        )

        cfg = load_config(cfg_file)

        assert cfg.workers == 4
        assert cfg.timeout_ms == 5000

    def test_accepts_string_path(self, tmp_path: pytest.TempPathFactory) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("port: 4443\n", encoding="utf-8")

        assert load_config(str(cfg_file)).port == 4443

    def test_quoted_integers_are_coerced(
        self, tmp_path: pytest.TempPathFactory
    ) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(
            textwrap.dedent("""\
                timeout_ms: "2000"
                port: ' 8443 '
                workers: "4"
            """),
            encoding="utf-8",
        )

        cfg = load_config(cfg_file)

        assert cfg.timeout_ms == 2000
        assert cfg.port == 8443
        assert cfg.workers == 4

    def test_format_is_case_insensitive(
        self, tmp_path: pytest.TempPathFactory
    ) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("format: JSON\n", encoding="utf-8")

        assert load_config(cfg_file).output_format == "json"


class TestLoadConfigMissingFile:
    """Behavior when the config file doesn't exist."""

    def test_explicit_path_not_found_raises(
        self, tmp_path: pytest.TempPathFactory
    ) -> None:
        missing = tmp_path / "nonexistent.yaml"

        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(missing)

    def test_no_default_file_returns_defaults(
        self, tmp_path: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """When no path is given and the default doesn't exist, return defaults."""
        import dhc.config as config_mod

        monkeypatch.setattr(
            config_mod, "DEFAULT_CONFIG_PATH", tmp_path / "nope" / "config.yaml"
        )

        assert load_config() == DhcConfig()

    def test_default_file_is_used(
        self, tmp_path: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import dhc.config as config_mod

        default = tmp_path / "config.yaml"
        default.write_text("workers: 3\n", encoding="utf-8")
        monkeypatch.setattr(config_mod, "DEFAULT_CONFIG_PATH", default)

        assert load_config().workers == 3


class TestLoadConfigInvalid:
    """load_config should raise ConfigError on malformed or out-of-range input."""

    def test_invalid_yaml_raises_config_error(
        self, tmp_path: pytest.TempPathFactory
    ) -> None:
        cfg_file = tmp_path / "bad.yaml"
        cfg_file.write_text(":\n  - :\n    bad: [", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(cfg_file)

    def test_non_mapping_top_level_raises(
        self, tmp_path: pytest.TempPathFactory
    ) -> None:
        cfg_file = tmp_path / "list.yaml"
        cfg_file.write_text("- one\n- two\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(cfg_file)

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ("timeout_ms: 0\n", "timeout_ms must be positive"),
            ("timeout_ms: fast\n", "timeout_ms must be an integer"),
            ('timeout_ms: "-5"\n', "timeout_ms must be an integer"),
            ("port: 70000\n", "port must be between"),
            ("workers: 0\n", "workers must be at least 1"),
            ("workers: true\n", "workers must be an integer"),
            ("format: xml\n", "output_format must be one of"),
            ("show_fastest: maybe\n", "show_fastest must be true or false"),
        ],
    )
    def test_out_of_range_values(
        self, tmp_path: pytest.TempPathFactory, body: str, message: str
    ) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(body, encoding="utf-8")

        with pytest.raises(ConfigError, match=message):
            load_config(cfg_file)


class TestValidateConfig:
    def test_defaults_are_valid(self) -> None:
        validate_config(DhcConfig())

    def test_rejects_negative_timeout(self) -> None:
        with pytest.raises(ConfigError):
            validate_config(DhcConfig(timeout_ms=-1))
