"""
TaskRelay Backend — Receipt Upload Validation
==============================================

What:  Validates uploaded receipt images before they are sent for OCR.
Why:   Rejecting a PDF or a 40MB photo here is a clear 400 for the client,
       instead of an opaque failure from the OCR provider.
How:   Extension check, size check, declared content-type check, then the
       file header bytes via python-magic (cheapest first). The image never
       touches disk; the validated bytes go straight to the OCR service.
Who:   Called by ExpenseService.log_from_image().
"""

import logging
from pathlib import Path
from typing import Optional

from taskrelay.exceptions import TaskRelayError, ValidationError

logger = logging.getLogger(__name__)

# What: Allowed MIME types and the extensions that may carry them
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}

_EXTENSION_MIME = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


class UploadService:
    """
    Validates an uploaded image held in memory.

    Args:
        max_size: Maximum accepted upload size in bytes.
    """

    def __init__(self, max_size: int = 10_485_760):
        self.max_size = max_size

    def validate_extension(self, filename: str) -> str:
        """
        Check the file extension against the allowed list.

        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if the extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content: bytes, content_length: Optional[int] = None) -> None:
        """
        Reject empty uploads and uploads over the configured maximum.

        Both the reported Content-Length and the actual byte count are checked;
        some clients report a wrong length.
        """
        max_mb = self.max_size / (1024 * 1024)

        if not content:
            raise ValidationError(
                message="Uploaded file is empty.",
                field="file",
            )

        if content_length and content_length > self.max_size:
            raise ValidationError(
                message=f"File is too large. Maximum size is {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if len(content) > self.max_size:
            raise ValidationError(
                message=(
                    f"File is too large ({len(content) / (1024 * 1024):.1f}MB). "
                    f"Maximum size is {max_mb:.0f}MB."
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": len(content)},
            )

    def resolve_mime_type(self, extension: str, content_type: Optional[str]) -> str:
        """
        Decide the MIME type sent to the OCR provider.

        A declared image content type must be one we accept. A missing or
        generic declaration (application/octet-stream) falls back to the type
        implied by the extension.
        """
        declared = (content_type or "").split(";")[0].strip().lower()
        if declared and declared != "application/octet-stream":
            if declared not in ALLOWED_MIME_TYPES:
                raise ValidationError(
                    message=(
                        f"Content type '{declared}' is not supported. "
                        f"The file must be a PNG, JPEG or WebP image."
                    ),
                    field="file",
                    context={"declared_mime": declared, "allowed": list(ALLOWED_MIME_TYPES)},
                )
            return "image/jpeg" if declared == "image/jpg" else declared
        return _EXTENSION_MIME[extension]

    def detect_mime_type(self, content: bytes) -> Optional[str]:
        """
        What:    Reads the true file type from its header bytes.
        Why:     A PDF renamed to receipt.jpg passes every check that trusts
                 the client. Caught here it is a 400, not an OCR failure.
        How:     python-magic matches the first bytes against known
                 signatures (JPEG starts with FF D8 FF, PNG with 89 50 4E 47).

        Returns None when libmagic is unavailable; the declared type and
        extension then stand alone.
        """
        try:
            import magic
            detected = magic.from_buffer(content, mime=True)
        except ImportError:
            # python-magic or libmagic missing on this host
            logger.warning(
                "python-magic not available; upload type is taken from the "
                "declared content type and extension only."
            )
            return None
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise TaskRelayError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            ) from e

        return "image/jpeg" if detected == "image/jpg" else detected

    def check_content_matches(self, detected: str, expected: str) -> None:
        """Reject content whose header bytes disagree with its name or declared type."""
        if detected not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{detected}' is not supported. "
                    f"The file must be a PNG, JPEG or WebP image."
                ),
                field="file",
                context={"detected_mime": detected, "allowed": list(ALLOWED_MIME_TYPES)},
            )
        if detected != expected:
            raise ValidationError(
                message=(
                    f"File content is {detected} but the upload claims {expected}. "
                    f"Re-save the image with a matching extension."
                ),
                field="file",
                context={"detected_mime": detected, "expected_mime": expected},
            )

    def validate(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Run every check and return the MIME type to send to OCR.

        Raises:
            ValidationError on the first failed check.
        """
        ext = self.validate_extension(filename)
        self.validate_size(content, content_length)
        mime_type = self.resolve_mime_type(ext, content_type)
        detected = self.detect_mime_type(content)
        if detected is not None:
            self.check_content_matches(detected, mime_type)
            mime_type = detected
        logger.debug("Accepted upload %s (%d bytes, %s)", filename, len(content), mime_type)
        return mime_type
