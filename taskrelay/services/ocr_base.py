"""
TaskRelay Backend — Abstract OCR Service Interface
===================================================

What:  Abstract base class for turning an uploaded image into text.
Why:   The expense flow only needs "image bytes in, text out". Keeping the
       provider behind an interface lets tests use a canned implementation and
       lets the provider change without touching ExpenseService.
How:   Concrete implementations inherit from OcrService and implement
       recognize_text().
Who:   Called by ExpenseService when logging an expense from a receipt image.
"""

from abc import ABC, abstractmethod


class OcrService(ABC):
    """
    Abstract interface for image text recognition.

    Contract:
        - recognize_text() accepts raw image bytes and their MIME type
        - Returns the recognized text; empty string when nothing was read
        - Provider failures are raised as UpstreamServiceError
        - Missing provider credentials are raised as ConfigurationError
    """

    @abstractmethod
    async def recognize_text(self, content: bytes, mime_type: str) -> str:
        """
        Recognize the printed text in an image.

        Args:
            content: Raw image bytes, already validated by UploadService.
            mime_type: e.g. "image/jpeg".

        Returns:
            str: Recognized text. Never None.
        """
        ...

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True when the provider has the credentials it needs."""
        ...
