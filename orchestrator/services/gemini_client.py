"""
Gemini Client
HTTP client for the Gemini text and Imagen image generation REST APIs.

Calls are blocking (requests); node effects run them in a worker thread
so the event loop stays free while a call is in flight.
"""
from typing import Dict, Any, Optional

import requests

from ..core.config import Config
from ..utils.logger import get_logger

logger = get_logger(__name__)


class GeminiAPIError(RuntimeError):
    """Raised when a Gemini/Imagen call cannot produce a result"""
    pass


class GeminiClient:
    """
    Thin wrapper over the generativelanguage REST endpoints

    The API key and models are resolved in this order:
    1. Constructor arguments
    2. Config (GEMINI_API_KEY / API_KEY, GEMINI_MODEL, IMAGEN_MODEL)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        text_model: Optional[str] = None,
        image_model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else Config.GEMINI_API_KEY
        self.base_url = (base_url or Config.GEMINI_API_BASE).rstrip("/")
        self.text_model = text_model or Config.GEMINI_MODEL
        self.image_model = image_model or Config.IMAGEN_MODEL
        self.timeout = timeout if timeout is not None else Config.HTTP_TIMEOUT

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _require_key(self) -> None:
        if not self.api_key:
            raise GeminiAPIError(
                "Gemini API key is not configured. Please set the GEMINI_API_KEY environment variable."
            )

    def _post(self, model: str, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/models/{model}:{method}"
        try:
            resp = requests.post(
                url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.Timeout:
            logger.error(f"Gemini request timed out ({self.timeout}s)")
            raise GeminiAPIError(f"Request timeout ({self.timeout}s)") from None
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            try:
                detail = e.response.json().get("error", {}).get("message", str(e))
            except (ValueError, AttributeError):
                detail = str(e)
            logger.error(f"Gemini HTTP error {status}: {detail}")
            raise GeminiAPIError(f"HTTP {status}: {detail}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            raise GeminiAPIError(f"Error calling Gemini API: {e}") from e

    def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Generate text from a prompt

        Args:
            prompt: User prompt
            system_instruction: Optional system instruction
            generation_config: Sampling parameters (temperature, topP, ...)

        Returns:
            Concatenated text of the first candidate
        """
        self._require_key()
        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if generation_config:
            payload["generationConfig"] = generation_config

        data = self._post(self.text_model, "generateContent", payload)
        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates returned")
            raise GeminiAPIError(f"Gemini returned no text: {reason}")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    def generate_image(self, prompt: str) -> str:
        """
        Generate one image from a prompt

        Returns:
            JPEG image as a data URL
        """
        self._require_key()
        payload = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": "1:1",
                "outputOptions": {"mimeType": "image/jpeg"},
            },
        }
        data = self._post(self.image_model, "predict", payload)
        predictions = data.get("predictions") or []
        if not predictions or not predictions[0].get("bytesBase64Encoded"):
            raise GeminiAPIError("Error generating image: no image returned")
        return f"data:image/jpeg;base64,{predictions[0]['bytesBase64Encoded']}"
