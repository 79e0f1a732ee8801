"""
TaskRelay Backend — Google Gemini OCR Implementation
=====================================================

What:  OcrService backed by the Gemini vision API.
Why:   Receipt photos are skewed, creased and low-light; a vision model reads
       them more reliably than classic OCR, and the free tier covers a
       personal expense log.
How:   Sends the in-memory image as an inline part together with a
       transcription prompt, returns the response text. One call, no retry:
       a failure is reported to the caller immediately.
Who:   Constructed by create_app(); called by ExpenseService.
"""

import logging
import time
import uuid

import google.generativeai as genai

from taskrelay.exceptions import ConfigurationError, UpstreamServiceError
from taskrelay.services.ocr_base import OcrService

logger = logging.getLogger(__name__)

SERVICE_NAME = "gemini_ocr"


class GeminiOcrService(OcrService):
    """
    Gemini vision text recognition for receipt images.

    The model is built lazily on the first call, so an app without a Gemini
    key still starts and serves every other route.
    """

    # Plain transcription only. The amount is picked by our own heuristic,
    # so the model must not summarize or reformat numbers.
    OCR_PROMPT = """Transcribe all printed and handwritten text in this receipt image.

Instructions:
1. Return ONLY the text, line by line, in reading order
2. Keep every number exactly as printed, including separators and decimals
3. Do not add commentary, totals or explanations
4. If there is no text, return an empty response"""

    def __init__(self, api_key: str, model_name: str = "gemini-1.5-flash", timeout: float = 60.0):
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self._model = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_model(self):
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY")
        if self._model is None:
            # The SDK keeps the key in module state; configure right before
            # building the model so the key always matches this instance.
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
            logger.info("GeminiOcrService initialized with model=%s", self.model_name)
        return self._model

    async def recognize_text(self, content: bytes, mime_type: str) -> str:
        """
        Recognize text in an image held in memory.

        Raises:
            ConfigurationError: GEMINI_API_KEY is not set
            UpstreamServiceError: the Gemini call failed
        """
        model = self._get_model()
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        logger.info("[%s] Starting OCR for %d-byte %s image", request_id, len(content), mime_type)

        try:
            response = await model.generate_content_async(
                [self.OCR_PROMPT, {"mime_type": mime_type, "data": content}],
                request_options={"timeout": self.timeout},
            )
            text = response.text.strip() if response.text else ""
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "[%s] Gemini OCR failed after %.0fms: %s",
                request_id,
                duration_ms,
                str(e),
            )
            raise UpstreamServiceError(
                SERVICE_NAME,
                message="Text recognition failed for the uploaded image",
                payload={"request_id": request_id, "error_type": type(e).__name__, "error": str(e)},
            ) from e

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "[%s] OCR completed in %.0fms, recognized %d chars",
            request_id,
            duration_ms,
            len(text),
        )
        return text
