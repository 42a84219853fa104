"""Tests for config loading."""

import pytest

from prompt_enhancer.config import (
    AppConfig,
    FewShotConfig,
    LLMConfig,
    load_config,
    parse_bool_env,
)


class TestConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.llm.model == "claude-haiku-4-5-20251001"
        assert config.retry.max_attempts == 3
        assert config.thinking.default_enabled is True
        assert config.validation.max_similarity == 0.95

    def test_load_config_defaults(self, tmp_path):
        """Loading from non-existent path returns defaults."""
        config = load_config(tmp_path / "nonexistent.yaml", env={})
        assert config.llm.timeout == 30
        assert config.fewshot.limit == 3

    def test_load_config_from_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            "llm:\n  model: test-model\nretry:\n  validation_attempts: 5\n"
        )
        config = load_config(yaml_path, env={})
        assert config.llm.model == "test-model"
        assert config.retry.validation_attempts == 5
        # Defaults for unspecified
        assert config.thinking.max_thoughts == 10

    def test_keyword_lists_become_tuples(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text("thinking:\n  complexity_keywords: [roadmap, audit]\n")
        config = load_config(yaml_path, env={})
        assert config.thinking.complexity_keywords == ("roadmap", "audit")

    def test_examples_resolved_path(self):
        fewshot = FewShotConfig(examples_path="~/examples.yaml")
        assert "~" not in str(fewshot.resolved_examples_path)
        assert FewShotConfig().resolved_examples_path is None

    def test_frozen_config(self):
        config = LLMConfig()
        with pytest.raises(AttributeError):
            config.model = "changed"

    def test_repr_masks_api_key(self):
        config = LLMConfig(api_key="sk-secret")
        assert "sk-secret" not in repr(config)
        assert "***" in repr(config)


class TestEnvOverrides:
    def test_api_key_from_env(self, tmp_path):
        config = load_config(tmp_path / "none.yaml", env={"ANTHROPIC_API_KEY": "sk-env"})
        assert config.llm.api_key == "sk-env"

    def test_custom_api_key_env_name(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text("llm:\n  api_key_env: MY_KEY\n")
        config = load_config(yaml_path, env={"MY_KEY": "sk-custom", "ANTHROPIC_API_KEY": "sk-other"})
        assert config.llm.api_key == "sk-custom"

    def test_model_and_base_url_from_env(self, tmp_path):
        config = load_config(
            tmp_path / "none.yaml",
            env={"ENHANCER_MODEL": "claude-sonnet-4-5-20250929", "ENHANCER_BASE_URL": "http://localhost:8080"},
        )
        assert config.llm.model == "claude-sonnet-4-5-20250929"
        assert config.llm.base_url == "http://localhost:8080"

    @pytest.mark.parametrize("value", ["false", "0", "no", "off", "FALSE", " Off "])
    def test_sequential_thinking_disabled(self, tmp_path, value):
        config = load_config(tmp_path / "none.yaml", env={"ENABLE_SEQUENTIAL_THINKING": value})
        assert config.thinking.default_enabled is False

    def test_sequential_thinking_unrecognized_value_enables(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text("thinking:\n  default_enabled: false\n")
        config = load_config(yaml_path, env={"ENABLE_SEQUENTIAL_THINKING": "maybe"})
        assert config.thinking.default_enabled is True

    def test_unset_env_keeps_yaml_value(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text("thinking:\n  default_enabled: false\n")
        config = load_config(yaml_path, env={})
        assert config.thinking.default_enabled is False

    def test_log_level_from_env(self, tmp_path):
        config = load_config(tmp_path / "none.yaml", env={"LOG_LEVEL": "debug"})
        assert config.logging.level == "DEBUG"


class TestParseBoolEnv:
    def test_unset_returns_default(self):
        assert parse_bool_env(None, True) is True
        assert parse_bool_env(None, False) is False

    @pytest.mark.parametrize("value", ["true", "1", "yes", "on", "TRUE"])
    def test_true_values(self, value):
        assert parse_bool_env(value, False) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "off"])
    def test_false_values(self, value):
        assert parse_bool_env(value, True) is False

    def test_unrecognized_is_true(self):
        assert parse_bool_env("enabled-ish", False) is True
