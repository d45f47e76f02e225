import base64
import logging

from openai import OpenAI

from config import get_setting
from functions.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_IMAGE_MODEL = "dall-e-3"


class ChatCompletionClient:
    """Thin wrapper over an OpenAI-compatible endpoint (chat + images)."""

    def __init__(self, api_key=None, base_url=None, model=None, image_model=None,
                 temperature=0.9, max_tokens=300):
        api_key = api_key or get_setting("LLM_API_KEY")
        if not api_key:
            raise ConfigurationError("LLM_API_KEY not configured")

        self.client = OpenAI(api_key=api_key, base_url=base_url or get_setting("LLM_BASE_URL"))
        self.model = model or get_setting("LLM_MODEL", DEFAULT_MODEL)
        self.image_model = image_model or get_setting("LLM_IMAGE_MODEL", DEFAULT_IMAGE_MODEL)
        self.temperature = temperature
        self.max_tokens = max_tokens

    def complete(self, messages):
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        content = response.choices[0].message.content if response.choices else None
        return content.strip() if content else None

    def generate_image(self, prompt, size="1024x1024"):
        response = self.client.images.generate(
            model=self.image_model,
            prompt=prompt,
            size=size,
            n=1,
            response_format="b64_json",
        )
        return base64.b64decode(response.data[0].b64_json)
