# backend/iaprof/core/security.py

from __future__ import annotations
from typing import Optional
import base64
import binascii
import re

from .constants import AIConstants, ValidationConstants

MAX_IMAGE_SIZE_BYTES = ValidationConstants.MAX_IMAGE_SIZE_MB * 1024 * 1024

JPEG_MAGIC = b"\xff\xd8\xff"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"

# caracteres de controle, exceto tab e quebra de linha
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


class InputValidator:
    @staticmethod
    def strip_data_url(image_b64: str) -> str:
        # aceita tanto o base64 puro quanto "data:image/jpeg;base64,..."
        image_b64 = (image_b64 or "").strip()
        if image_b64.startswith("data:") and "," in image_b64:
            return image_b64.split(",", 1)[1]
        return image_b64

    @staticmethod
    def validate_image_base64(image_b64: str) -> tuple[bool, Optional[str]]:
        payload = InputValidator.strip_data_url(image_b64)
        if not payload:
            return False, "imagem vazia"
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            return False, "base64 inválido"
        if len(raw) > MAX_IMAGE_SIZE_BYTES:
            return False, f"arquivo maior que {ValidationConstants.MAX_IMAGE_SIZE_MB}MB"
        if not (raw.startswith(JPEG_MAGIC) or raw.startswith(PNG_MAGIC)):
            return False, "formato não suportado"
        return True, None

    @staticmethod
    def detect_image_mime(image_b64: str) -> str:
        payload = InputValidator.strip_data_url(image_b64)
        try:
            head = base64.b64decode(payload[:16])
        except (binascii.Error, ValueError):
            return AIConstants.IMAGE_MIME_TYPE
        if head.startswith(PNG_MAGIC):
            return "image/png"
        return AIConstants.IMAGE_MIME_TYPE

    @staticmethod
    def sanitize_text_input(text: str, max_len: int = 500) -> str:
        # sem escape de HTML: o texto segue cru para o prompt e para as listas do modelo
        text = CONTROL_CHARS_RE.sub("", text or "")
        return text.strip()[:max_len].strip()
