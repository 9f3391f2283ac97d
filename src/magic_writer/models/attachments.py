"""Attached file value object sent along with draft prompts."""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

IMAGE_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}


class AttachedFile(BaseModel):
    """A file attached to a generation request, carried as base64."""

    model_config = ConfigDict(frozen=True)

    name: str
    mime_type: str
    data: str  # base64 payload, no data-URL prefix

    @classmethod
    def from_bytes(cls, name: str, payload: bytes, mime_type: str | None = None) -> AttachedFile:
        if mime_type is None:
            mime_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
        return cls(
            name=name,
            mime_type=mime_type,
            data=base64.b64encode(payload).decode("ascii"),
        )

    @classmethod
    def from_data_url(cls, name: str, url: str) -> AttachedFile:
        """Build from a ``data:<mime>;base64,<payload>`` URL."""
        header, sep, payload = url.partition(",")
        if not sep or not header.startswith("data:"):
            raise ValueError(f"Not a data URL: {url[:40]}...")
        mime_type = header[len("data:"):].split(";")[0] or "application/octet-stream"
        return cls(name=name, mime_type=mime_type, data=payload)

    def to_content_block(self) -> dict | None:
        """Map to an Anthropic message content block, or None if unsupported."""
        if self.mime_type in IMAGE_TYPES:
            return {
                "type": "image",
                "source": {"type": "base64", "media_type": self.mime_type, "data": self.data},
            }
        if self.mime_type == "application/pdf":
            return {
                "type": "document",
                "source": {"type": "base64", "media_type": self.mime_type, "data": self.data},
            }
        if self.mime_type.startswith("text/"):
            try:
                text = base64.b64decode(self.data).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError):
                logger.warning("Attachment %s is not valid UTF-8 text", self.name)
                return None
            return {"type": "text", "text": f"Attached file: {self.name}\n---\n{text}\n---"}
        logger.warning("Attachment %s has unsupported type %s", self.name, self.mime_type)
        return None
