import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from ..application.content import AIServiceError, ITextGenerator

GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_p": 0.8,
    "top_k": 40,
}


class GeminiTextGenerator(ITextGenerator):
    """Text generation backed by the Gemini API."""

    def __init__(self, api_key: str, model_name: str, timeout: float = 60.0):
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self._model = None

    def _get_model(self) -> genai.GenerativeModel:
        if not self.api_key:
            raise AIServiceError("GEMINI_API_KEY is not configured")
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name, generation_config=GENERATION_CONFIG)
        return self._model

    def generate(self, prompt: str) -> str:
        model = self._get_model()
        try:
            response = model.generate_content(prompt, request_options={"timeout": self.timeout})
            text = response.text
        except google_exceptions.GoogleAPIError as exc:
            # quota, timeout and transport errors
            raise AIServiceError(str(exc)) from exc
        except ValueError as exc:
            # response.text raises when the candidate was blocked
            raise AIServiceError(f"No usable response: {exc}") from exc
        if not text:
            raise AIServiceError("Empty response from AI service")
        return text
