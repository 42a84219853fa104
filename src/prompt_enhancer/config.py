"""Application configuration loaded from config.yaml and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

MAX_THOUGHTS = 10

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}

DEFAULT_COMPLEXITY_KEYWORDS: tuple[str, ...] = (
    "step by step",
    "analyze",
    "analyse",
    "compare",
    "design",
    "architecture",
    "strategy",
    "plan",
    "trade-off",
    "tradeoff",
    "evaluate",
    "optimize",
    "multi-step",
    "workflow",
    "pipeline",
)

DEFAULT_FLAGGED_TERMS: tuple[str, ...] = ("inappropriate", "offensive")

DEFAULT_PLACEHOLDER_PATTERNS: tuple[str, ...] = (
    r"\{\{[^{}]*\}\}",
    r"\{[a-z_][a-z0-9_]*\}",
    r"\[\s*insert[^\]]*\]",
    r"\[\s*your [^\]]*\]",
    r"<[^<>]*\bhere\s*>",
    r"(?-i:\bTODO\b)",
    r"lorem ipsum",
)


def _check_range(name: str, value: float, low: float, high: float | None = None) -> None:
    if value < low or (high is not None and value > high):
        bound = f"between {low} and {high}" if high is not None else f">= {low}"
        raise ValueError(f"{name} must be {bound}, got {value!r}")


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-haiku-4-5-20251001"
    base_url: str | None = None
    api_key: str | None = None
    api_key_env: str = "ANTHROPIC_API_KEY"
    timeout: float = 30.0
    max_tokens: int = 2048
    temperature: float = 0.2

    def __post_init__(self) -> None:
        _check_range("timeout", self.timeout, 1, 600)
        _check_range("max_tokens", self.max_tokens, 64, 64000)
        _check_range("temperature", self.temperature, 0.0, 1.0)

    def __repr__(self) -> str:
        # Never print the credential.
        key = "***" if self.api_key else None
        return (
            f"LLMConfig(model={self.model!r}, base_url={self.base_url!r}, "
            f"api_key={key!r}, timeout={self.timeout!r})"
        )


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    validation_attempts: int = 3
    thought_attempts: int = 2
    backoff_base: float = 0.5
    backoff_max: float = 8.0
    request_deadline: float = 120.0

    def __post_init__(self) -> None:
        _check_range("max_attempts", self.max_attempts, 1, 10)
        _check_range("validation_attempts", self.validation_attempts, 1, 10)
        _check_range("thought_attempts", self.thought_attempts, 1, 10)
        _check_range("backoff_base", self.backoff_base, 0.0)
        _check_range("backoff_max", self.backoff_max, 0.0)
        _check_range("request_deadline", self.request_deadline, 1)


@dataclass(frozen=True)
class ThinkingConfig:
    default_enabled: bool = True
    default_thoughts: int = 3
    max_thoughts: int = MAX_THOUGHTS
    complexity_min_words: int = 25
    complexity_keywords: tuple[str, ...] = DEFAULT_COMPLEXITY_KEYWORDS

    def __post_init__(self) -> None:
        _check_range("max_thoughts", self.max_thoughts, 1, MAX_THOUGHTS)
        _check_range("default_thoughts", self.default_thoughts, 1, self.max_thoughts)
        _check_range("complexity_min_words", self.complexity_min_words, 1)
        object.__setattr__(self, "complexity_keywords", tuple(self.complexity_keywords))


@dataclass(frozen=True)
class ValidationConfig:
    min_chars: int = 20
    min_words: int = 8
    min_length_ratio: float = 1.0
    max_chars: int = 5000
    max_prompt_chars: int = 4000
    max_similarity: float = 0.95
    placeholder_patterns: tuple[str, ...] = DEFAULT_PLACEHOLDER_PATTERNS
    flagged_terms: tuple[str, ...] = DEFAULT_FLAGGED_TERMS

    def __post_init__(self) -> None:
        _check_range("min_chars", self.min_chars, 1)
        _check_range("min_words", self.min_words, 1)
        _check_range("min_length_ratio", self.min_length_ratio, 0.0, 10.0)
        _check_range("max_chars", self.max_chars, self.min_chars)
        _check_range("max_prompt_chars", self.max_prompt_chars, 1)
        _check_range("max_similarity", self.max_similarity, 0.0, 1.0)
        object.__setattr__(self, "placeholder_patterns", tuple(self.placeholder_patterns))
        object.__setattr__(self, "flagged_terms", tuple(t.lower() for t in self.flagged_terms))


@dataclass(frozen=True)
class FewShotConfig:
    limit: int = 3
    examples_path: str | None = None

    def __post_init__(self) -> None:
        _check_range("limit", self.limit, 0, 10)

    @property
    def resolved_examples_path(self) -> Path | None:
        if self.examples_path is None:
            return None
        return Path(self.examples_path).expanduser()


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"

    def __post_init__(self) -> None:
        level = self.level.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"level must be a standard logging level, got {self.level!r}")
        object.__setattr__(self, "level", level)


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    thinking: ThinkingConfig = field(default_factory=ThinkingConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    fewshot: FewShotConfig = field(default_factory=FewShotConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def parse_bool_env(value: str | None, default: bool) -> bool:
    """Interpret a boolean environment flag.

    Unset returns ``default``; recognised false words return False and
    anything else that is set (including unrecognised values) returns True.
    """
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    return True


def _apply_env(config: AppConfig, env: dict[str, str]) -> AppConfig:
    llm = config.llm
    llm_key = env.get(llm.api_key_env)
    if llm_key:
        llm = replace(llm, api_key=llm_key)
    if env.get("ENHANCER_MODEL"):
        llm = replace(llm, model=env["ENHANCER_MODEL"])
    if env.get("ENHANCER_BASE_URL"):
        llm = replace(llm, base_url=env["ENHANCER_BASE_URL"])

    thinking = replace(
        config.thinking,
        default_enabled=parse_bool_env(
            env.get("ENABLE_SEQUENTIAL_THINKING"), config.thinking.default_enabled
        ),
    )

    logging_cfg = config.logging
    if env.get("LOG_LEVEL"):
        logging_cfg = LoggingConfig(level=env["LOG_LEVEL"])

    return replace(config, llm=llm, thinking=thinking, logging=logging_cfg)


def load_config(
    path: str | Path | None = None,
    env: dict[str, str] | None = None,
) -> AppConfig:
    """Load config from YAML file, falling back to defaults, then apply env overrides."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    config = AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        retry=RetryConfig(**raw.get("retry", {})),
        thinking=ThinkingConfig(**raw.get("thinking", {})),
        validation=ValidationConfig(**raw.get("validation", {})),
        fewshot=FewShotConfig(**raw.get("fewshot", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
    )
    return _apply_env(config, dict(os.environ) if env is None else env)
