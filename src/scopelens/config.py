"""Configuration helpers for ScopeLens extraction."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import SimpleNamespace
from typing import Mapping, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("scopelens.json")
DEFAULT_HISTORY_PATH = Path.home() / ".scopelens" / "history.json"
DEFAULT_HISTORY_LIMIT = 50
LOGGER = logging.getLogger(__name__)

_BOOLEAN_TRUE = {"1", "true", "yes", "on"}


@dataclass
class AIConfig:
    enabled: bool = False
    provider: str = "openai"
    api_key_path: Path | None = None
    api_key_env: str = "OPENAI_API_KEY"
    model: str = "gpt-4o-mini"
    system_prompt: Optional[str] = None
    timeout_seconds: float = 60.0
    max_context_chars: int = 60000

    def resolve_api_key(self) -> Optional[str]:
        """Return the API key from the environment or configured file."""
        if self.api_key_env and self.api_key_env in os.environ:
            token = os.environ[self.api_key_env].strip()
            if token:
                return token
        if self.api_key_path:
            try:
                content = Path(self.api_key_path).expanduser().read_text(encoding="utf-8")
            except FileNotFoundError:
                return None
            except OSError:
                LOGGER.debug("Unable to read AI API key from %s", self.api_key_path)
                return None
            token = content.strip()
            return token or None
        return None


@dataclass
class HistoryConfig:
    path: Path = DEFAULT_HISTORY_PATH
    max_entries: int = DEFAULT_HISTORY_LIMIT


@dataclass
class ScopeLensConfig:
    ai: AIConfig = field(default_factory=AIConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    verbose: bool = False

    @classmethod
    def load(cls, path: Path | None = None) -> "ScopeLensConfig":
        """Load configuration from YAML/JSON file."""
        config_path = path or DEFAULT_CONFIG_PATH
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as f:
            if config_path.suffix.lower() in {".yaml", ".yml"}:
                raw = yaml.safe_load(f)
            else:
                raw = json.load(f)

        return cls.from_dict(raw or {})

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "ScopeLensConfig":
        ai = raw.get("ai") or {}
        history = raw.get("history") or {}

        default_ai = AIConfig()
        ai_cfg = AIConfig(
            enabled=_flag(ai.get("enabled", False)),
            provider=str(ai.get("provider", default_ai.provider)),
            api_key_path=_to_path(ai.get("api_key_path")),
            api_key_env=str(ai.get("api_key_env", default_ai.api_key_env)),
            model=str(ai.get("model", default_ai.model)),
            system_prompt=ai.get("system_prompt"),
            timeout_seconds=float(ai.get("timeout_seconds", default_ai.timeout_seconds)),
            max_context_chars=int(ai.get("max_context_chars", default_ai.max_context_chars)),
        )
        history_cfg = HistoryConfig(
            path=_to_path(history.get("path")) or DEFAULT_HISTORY_PATH,
            max_entries=_to_int(history.get("max_entries")) or DEFAULT_HISTORY_LIMIT,
        )
        return cls(ai=ai_cfg, history=history_cfg, verbose=_flag(raw.get("verbose", False)))


def _to_path(value: object | None) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser()
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser()


def _to_int(value: object | None) -> Optional[int]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(float(text))
    except ValueError:
        return None


def _flag(value: object | None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _BOOLEAN_TRUE


def _namespace(cli_args: object | None) -> SimpleNamespace:
    if cli_args is None:
        return SimpleNamespace()
    if isinstance(cli_args, SimpleNamespace):
        return cli_args
    if hasattr(cli_args, "__dict__"):
        return SimpleNamespace(**{k: v for k, v in vars(cli_args).items()})
    return SimpleNamespace()


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> ScopeLensConfig:
    """Build a :class:`ScopeLensConfig` from a config file, the environment and CLI options."""

    cli_ns = _namespace(cli_args)
    config_path = _to_path(getattr(cli_ns, "config", None)) or _to_path(env.get("SCOPELENS_CONFIG"))
    if config_path is not None:
        config = ScopeLensConfig.load(config_path)
    elif DEFAULT_CONFIG_PATH.exists():
        config = ScopeLensConfig.load(DEFAULT_CONFIG_PATH)
    else:
        config = ScopeLensConfig()

    if env.get("SCOPELENS_AI_ENABLED") is not None:
        config.ai.enabled = _flag(env.get("SCOPELENS_AI_ENABLED"))
    if _flag(env.get("DISABLE_OPENAI")):
        config.ai.enabled = False
    if env.get("OPENAI_MODEL"):
        config.ai.model = env["OPENAI_MODEL"].strip()
    if env.get("OPENAI_API_KEY_FILE"):
        config.ai.api_key_path = _to_path(env.get("OPENAI_API_KEY_FILE"))
    history_path = _to_path(env.get("SCOPELENS_HISTORY_FILE"))
    if history_path is not None:
        config.history.path = history_path
    history_limit = _to_int(env.get("SCOPELENS_HISTORY_LIMIT"))
    if history_limit:
        config.history.max_entries = max(1, history_limit)

    if getattr(cli_ns, "disable_ai", False):
        config.ai.enabled = False
    if getattr(cli_ns, "model", None):
        config.ai.model = str(cli_ns.model)
    if getattr(cli_ns, "history_file", None):
        config.history.path = _to_path(cli_ns.history_file) or config.history.path
    if getattr(cli_ns, "verbose", False):
        config.verbose = True
    return config


__all__ = ["AIConfig", "HistoryConfig", "ScopeLensConfig", "load_config"]
