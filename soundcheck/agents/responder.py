from __future__ import annotations

from typing import Sequence

from soundcheck import llm_client
from soundcheck.config import settings
from soundcheck.models.schemas import GeneratedAnswer
from soundcheck.services.citations import enforce_allowlist, extract_urls
from soundcheck.services.prompt_store import render_prompt


class ResponseGenerator:
    """Grounded answers and weekly digests on top of the generation provider.

    Both modes are single-shot. Provider errors are not caught here; the
    turn-level handler in Assistant owns the user-facing apology.
    """

    name = "responder"

    def __init__(
        self,
        client: llm_client.CompletionProvider | None = None,
        model: str | None = None,
        language: str | None = None,
    ):
        self.client = client
        self.model = model or llm_client.get_model()
        self.language = language or settings.answer_language

    def _active_client(self) -> llm_client.CompletionProvider:
        return self.client or llm_client.client()

    def build_answer_messages(
        self,
        user_message: str,
        context: str | None,
        allowed_urls: Sequence[str],
    ) -> list[dict[str, str]]:
        system = render_prompt("responder.system_prompt", language=self.language)
        if context:
            content = render_prompt(
                "responder.grounded_request",
                context=context,
                allowed_urls="\n".join(f"- {url}" for url in allowed_urls),
                question=user_message,
            )
        else:
            content = render_prompt("responder.ungrounded_request", question=user_message)
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": content},
        ]

    async def answer(
        self,
        user_message: str,
        context: str | None = None,
        allowed_urls: Sequence[str] = (),
    ) -> GeneratedAnswer:
        """Answer `user_message`, citing only `allowed_urls`.

        Without context nothing may be cited, so the allowlist is treated as
        empty regardless of what was passed.
        """
        permitted = list(allowed_urls) if context else []
        raw = await self._active_client().complete(
            self.build_answer_messages(user_message, context, permitted),
            model=self.model,
            temperature=0.3,
            max_tokens=2048,
            caller=f"{self.name}.answer",
        )
        checked = enforce_allowlist(raw, permitted)
        return GeneratedAnswer(
            text=checked.text,
            allowed_urls=permitted,
            removed_urls=checked.removed_urls,
        )

    def build_digest_messages(self, articles_context: str, top_n: int) -> list[dict[str, str]]:
        return [
            {
                "role": "system",
                "content": render_prompt(
                    "responder.ranking_prompt", top_n=top_n, language=self.language
                ),
            },
            {
                "role": "user",
                "content": render_prompt(
                    "responder.digest_request", context=articles_context, top_n=top_n
                ),
            },
        ]

    async def digest(
        self,
        articles_context: str,
        top_n: int | None = None,
        allowed_urls: Sequence[str] | None = None,
    ) -> GeneratedAnswer:
        """Pick and summarize the top-N stories from a formatted article pool.

        `allowed_urls` defaults to the URLs found in the pool itself.
        """
        limit = top_n or settings.digest_top_n
        raw = await self._active_client().complete(
            self.build_digest_messages(articles_context, limit),
            model=self.model,
            temperature=0.2,
            max_tokens=3000,
            caller=f"{self.name}.digest",
        )
        permitted = list(allowed_urls) if allowed_urls is not None else extract_urls(articles_context)
        checked = enforce_allowlist(raw, permitted)
        return GeneratedAnswer(
            text=checked.text,
            allowed_urls=permitted,
            removed_urls=checked.removed_urls,
        )
