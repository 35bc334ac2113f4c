from __future__ import annotations

import re
from datetime import date, timedelta

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # LLM (OpenAI-compatible endpoint; point base_url at OpenRouter to use it instead)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    default_model: str = "gpt-4o-mini"
    planner_model: str = ""  # optional override for query planning only

    # Search provider
    search_provider: str = "exa"  # exa | tavily
    exa_api_key: str = ""
    exa_base_url: str = "https://api.exa.ai"
    tavily_api_key: str = ""
    search_domains: list[str] = [
        "pitchfork.com",
        "residentadvisor.net",
        "nytimes.com",
        "theguardian.com",
        "stereogum.com",
        "consequenceofsound.net",
        "nme.com",
        "rollingstone.com",
    ]
    search_days_back: int = 7
    search_max_results: int = 10
    digest_max_results: int = 10
    search_text_max_chars: int = 500
    snippet_max_chars: int = 300
    search_timeout_seconds: float = 30.0

    # Provider rate limit: at most `search_batch_size` calls per delay window
    search_batch_size: int = 4
    search_batch_delay_seconds: float = 1.2

    # Planning
    planner_max_queries: int = 3

    # Index/category page detection, matched against the lowercased URL path
    index_page_patterns: list[str] = [
        r"^/(news|reviews|features|music|interviews|lists)/?$",
        r"^/reviews/(albums|tracks)/?$",
        r"^/reviews/best(/.*)?$",
        r"^/music/music-[a-z-]+/?$",
        r"^(/[^/]+)?/(tag|tags|topic|topics|category|categories|genre|genres)(/.*)?$",
        r"^/(author|authors|contributor|contributors|staff)(/.*)?$",
        r"/page/\d+/?$",
    ]

    # Weekly digest
    digest_top_n: int = 10
    weekly_queries: list[str] = [
        "new album release this week",
        "music awards nominations winners",
        "tour announcement festival lineup",
        "musician dies reunion comeback announcement",
        "music industry streaming labels news",
        "surprise collaboration new single",
        "breakout new artist debut acclaim",
    ]

    # Output
    answer_language: str = "Russian"
    context_date_format: str = "%d.%m.%Y"
    greeting_message: str = (
        "Привет! Я музыкальный эксперт-бот.\n\n"
        "Спроси меня о музыкальных новостях, релизах, артистах — я найду актуальную "
        "информацию и отвечу со ссылками на источники.\n\n"
        "Команды:\n"
        "/news — сводка 10 главных музыкальных новостей за неделю\n\n"
        "Или просто напиши вопрос:\n"
        '• "Новые альбомы этой недели"\n'
        '• "Что нового в электронной музыке?"'
    )
    no_news_message: str = "За последнюю неделю не удалось найти музыкальных новостей. Попробуйте позже."
    answer_error_message: str = "Произошла ошибка при обработке запроса. Попробуйте ещё раз."
    digest_error_message: str = "Произошла ошибка при получении новостей. Попробуйте позже."

    # App
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"

    @field_validator("index_page_patterns")
    @classmethod
    def _check_patterns(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid index page pattern {pattern!r}: {exc}") from exc
        return patterns

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def date_floor(self, days: int | None = None) -> date | None:
        """Earliest publication date to request, or None when the window is disabled."""
        window = self.search_days_back if days is None else days
        if window <= 0:
            return None
        return date.today() - timedelta(days=window)


settings = Settings()
