from functools import lru_cache

from ...application.certificates import IImageRenderer
from ...application.content import ContentGenerator
from ...config import settings
from ...infrastructure.gemini import GeminiTextGenerator
from ...infrastructure.renderer import HeadlessImageRenderer


@lru_cache
def get_content_generator() -> ContentGenerator:
    client = GeminiTextGenerator(
        api_key=settings.GEMINI_API_KEY,
        model_name=settings.GEMINI_MODEL,
        timeout=settings.AI_TIMEOUT_SECONDS,
    )
    return ContentGenerator(
        client,
        max_retries=settings.AI_MAX_RETRIES,
        base_delay=settings.AI_RETRY_BASE_DELAY,
    )


def get_image_renderer() -> IImageRenderer:
    return HeadlessImageRenderer(timeout_ms=settings.RENDER_TIMEOUT_MS)
