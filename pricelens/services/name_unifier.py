# pricelens/services/name_unifier.py

"""Turn a product link into a platform-neutral search string via an LLM."""

import logging

from openai import OpenAI, OpenAIError

from pricelens.config.settings import Settings

logger = logging.getLogger("pricelens.unifier")

UNIFY_PROMPT = """\
You are a product name extraction and normalization AI.
Given a product link from any e-commerce platform,
extract the main product name (brand + model + essential specs) and return
a clean, unified product name suitable for searching across all platforms.
Now process this link: {link}
Return only the unified product name. No explanation."""


class UnifierError(Exception):
    """The model call failed or returned nothing usable."""


class UnifierConfigError(UnifierError):
    """No API key is configured."""


class NameUnifier:
    """Gemini, reached through its OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        client: OpenAI | None = None,
    ) -> None:
        self.settings = Settings()
        key = api_key or self.settings.GOOGLE_API_KEY
        if client is None and not key:
            msg = "Missing GOOGLE_API_KEY in environment"
            raise UnifierConfigError(msg)
        self.client = client or OpenAI(
            api_key=key, base_url=self.settings.UNIFY_BASE_URL,
        )

    def unify(self, link: str) -> str:
        """Return the unified product name for *link*."""
        try:
            response = self.client.chat.completions.create(
                model=self.settings.UNIFY_MODEL,
                messages=[
                    {"role": "user", "content": UNIFY_PROMPT.format(link=link)},
                ],
            )
        except OpenAIError as e:
            logger.error("Name unification failed: %s", e, exc_info=True)
            raise UnifierError(str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        name = (content or "").strip()
        if not name:
            raise UnifierError("Model returned an empty product name")

        logger.info("Unified %s -> '%s'", link, name)
        return name
