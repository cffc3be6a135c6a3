"""
NoteShare Backend - OCR Collaborator
======================================

What:  Best-effort text extraction from uploaded note images.
How:   `OCREngine` is the abstract contract. Implementations:
       - TesseractOCREngine: Tesseract via pytesseract (default, runs locally)
       - GeminiOCREngine:    Google Gemini vision model
       The engine is chosen with OCR_ENGINE.
Who:   Called by NoteService for image/jpeg and image/png uploads only.

Contract:
    - extract_text() takes the original uploaded bytes, returns stripped text
    - any failure is raised as OCRError; the caller decides to swallow it
    - no retries: a failed extraction simply means "no text"

Progress is reported through the logger only (start, duration, size).
"""

import asyncio
import io
import logging
import time
import uuid
from abc import ABC, abstractmethod
from typing import Optional

import google.generativeai as genai
import pytesseract
from PIL import Image

from noteshare.exceptions import OCRError

logger = logging.getLogger(__name__)

# Content types that are sent to OCR; everything else is skipped
OCR_CONTENT_TYPES = frozenset({"image/jpeg", "image/png"})


def should_run_ocr(content_type: Optional[str]) -> bool:
    """True only for the exact content types image/jpeg and image/png."""
    return content_type in OCR_CONTENT_TYPES


class OCREngine(ABC):
    """
    Abstract interface for text extraction engines.

    Implementations:
        - TesseractOCREngine
        - GeminiOCREngine
    """

    engine_name: str = "abstract"

    @abstractmethod
    async def extract_text(self, content: bytes) -> str:
        """
        Extract text from image bytes.

        Returns:
            The extracted text; "" when the image holds no text.
        Raises:
            OCRError: the engine failed for any reason.
        """
        ...


class TesseractOCREngine(OCREngine):
    """
    Tesseract OCR through pytesseract.

    pytesseract shells out to the tesseract binary and blocks, so each call
    runs in a worker thread to keep the event loop free.
    """

    engine_name = "tesseract"

    def __init__(self, language: str = "eng", tesseract_cmd: Optional[str] = None):
        self.language = language
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        logger.info("TesseractOCREngine initialized with language=%s", language)

    async def extract_text(self, content: bytes) -> str:
        job_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()
        logger.info("[%s] OCR started (%d bytes)", job_id, len(content))

        try:
            text = await asyncio.to_thread(self._recognize, content)
        except Exception as e:
            logger.warning(
                "[%s] OCR failed after %.0fms: %s",
                job_id,
                (time.perf_counter() - start_time) * 1000,
                str(e),
            )
            raise OCRError(context={"job_id": job_id, "error_type": type(e).__name__})

        text = text.strip()
        logger.info(
            "[%s] OCR completed in %.0fms, extracted %d chars",
            job_id,
            (time.perf_counter() - start_time) * 1000,
            len(text),
        )
        return text

    def _recognize(self, content: bytes) -> str:
        with Image.open(io.BytesIO(content)) as image:
            return pytesseract.image_to_string(image, lang=self.language)


class GeminiOCREngine(OCREngine):
    """
    Google Gemini vision model used as an OCR engine.

    Sends the decoded image with an extraction prompt in a single
    generate_content call. Suited to handwriting, which Tesseract reads poorly.
    """

    engine_name = "gemini"

    PROMPT = """Extract ALL text from this image of study notes.

Instructions:
1. Preserve the original structure (paragraphs, line breaks, bullet points)
2. Preserve mathematical notation if present
3. Return ONLY the extracted text, with no commentary or description of the image
4. If the image contains no text, return an empty response"""

    def __init__(self, api_key: str, model_name: str = "gemini-1.5-flash", timeout: float = 60.0):
        if api_key:
            genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        self.timeout = timeout
        logger.info("GeminiOCREngine initialized with model=%s", model_name)

    async def extract_text(self, content: bytes) -> str:
        job_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()
        logger.info("[%s] Gemini OCR started (%d bytes)", job_id, len(content))

        try:
            image = Image.open(io.BytesIO(content))
            response = await self.model.generate_content_async(
                [self.PROMPT, image],
                request_options={"timeout": self.timeout},
            )
            text = response.text.strip() if response.text else ""
        except Exception as e:
            logger.warning(
                "[%s] Gemini OCR failed after %.0fms: %s",
                job_id,
                (time.perf_counter() - start_time) * 1000,
                str(e),
            )
            raise OCRError(context={"job_id": job_id, "error_type": type(e).__name__})

        logger.info(
            "[%s] Gemini OCR completed in %.0fms, extracted %d chars",
            job_id,
            (time.perf_counter() - start_time) * 1000,
            len(text),
        )
        return text
