"""
Copy Rewriter
Rewrites product description HTML with an LLM. Optional: without an API
key, or on any failure, the original HTML is returned unchanged.
"""

import logging
import re
from typing import Optional

import requests

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"

SYSTEM_PROMPT = (
    "You are an e-commerce SEO expert. Rewrite product descriptions to be unique and "
    "persuasive but keep technical specs intact. Output ONLY valid HTML."
)

_CODE_FENCE = re.compile(r"^```(?:html)?\s*|\s*```$", re.IGNORECASE)


class CopyRewriter:
    """
    Description rewriter backed by the chat completions API.

    Usage:
        rewriter = CopyRewriter()
        html = rewriter.rewrite("Linen Shirt", "<p>Original copy</p>")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.api_key = api_key if api_key is not None else self.settings.openai_api_key
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def rewrite(self, title: str, original_html: str) -> str:
        """
        Rewrite a description.

        Args:
            title: Product title, used as context
            original_html: Description to rewrite

        Returns:
            Rewritten HTML, or `original_html` if rewriting is unavailable or fails
        """
        if not self.enabled or not original_html:
            return original_html

        try:
            response = self.session.post(
                CHAT_COMPLETIONS_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.settings.openai_model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {
                            "role": "user",
                            "content": (
                                f'Rewrite the description of the product titled "{title}".\n'
                                f"Original: {original_html}"
                            ),
                        },
                    ],
                    "max_tokens": self.settings.rewrite_max_tokens,
                },
                timeout=self.settings.openai_timeout,
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except Exception as e:
            logger.error(f"Description rewrite failed for {title!r}: {e}")
            return original_html

        content = _CODE_FENCE.sub("", (content or "").strip())
        return content or original_html
