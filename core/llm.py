# core/llm.py
"""
Gemini client for Groov.
Only short, single-answer prompts are sent (duration estimates).
"""
import logging
from google import genai
from google.genai import types

from core import config

logger = logging.getLogger(__name__)


class LLM:
    """Google GenAI client bound to one model."""

    def __init__(self, api_key: str, model_name: str = config.MODEL_NAME):
        """
        Args:
            api_key: Gemini API key
            model_name: Model id, GROOV_MODEL overrides the default
        """
        self.client = genai.Client(api_key=api_key)
        self.model_name = model_name

    def generate(self, prompt: str, system_instruction: str = "",
                 temperature: float = 0.2, max_tokens: int = 64) -> str:
        """
        Send one prompt and return the reply text.

        Errors from the API are not caught here; callers pick their own fallback.

        Returns:
            Reply text, "" when the model sends back nothing
        """
        logger.info(f"🤖 Asking {self.model_name}: {prompt[:80]!r}")

        settings = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            system_instruction=system_instruction or None,
        )
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=settings,
        )

        text = response.text or ""
        logger.info(f"   Reply: {text[:80]!r}")
        return text
