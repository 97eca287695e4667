import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

DEFAULT_BASE_URL = "https://hacker-news.firebaseio.com/v0"

T = TypeVar("T")


def _env(env: Mapping[str, str], name: str, cast: Callable[[str], T], default: T) -> T:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ValueError(f"{name}={raw!r} is not a valid {cast.__name__}") from e


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    retries: int = 3
    backoff: float = 0.5
    timeout: float = 5.0
    max_workers: int = 8
    thread_depth: int = 3
    thread_limit: int = 100
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        settings = cls(
            base_url=(env.get("HACKERNEWS_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            retries=_env(env, "HACKERNEWS_RETRIES", int, cls.retries),
            backoff=_env(env, "HACKERNEWS_BACKOFF", float, cls.backoff),
            timeout=_env(env, "HACKERNEWS_TIMEOUT", float, cls.timeout),
            max_workers=_env(env, "HACKERNEWS_MAX_WORKERS", int, cls.max_workers),
            thread_depth=_env(env, "HACKERNEWS_THREAD_DEPTH", int, cls.thread_depth),
            thread_limit=_env(env, "HACKERNEWS_THREAD_LIMIT", int, cls.thread_limit),
            log_level=(env.get("HACKERNEWS_LOG_LEVEL") or cls.log_level).upper(),
        )
        if settings.max_workers < 1:
            raise ValueError(f"HACKERNEWS_MAX_WORKERS must be >= 1, got {settings.max_workers}")
        if settings.retries < 0:
            raise ValueError(f"HACKERNEWS_RETRIES must be >= 0, got {settings.retries}")
        if settings.thread_depth < 0:
            raise ValueError(f"HACKERNEWS_THREAD_DEPTH must be >= 0, got {settings.thread_depth}")
        if settings.thread_limit < 1:
            raise ValueError(f"HACKERNEWS_THREAD_LIMIT must be >= 1, got {settings.thread_limit}")
        return settings
