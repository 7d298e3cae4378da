"""
Script File Reader

Reads an uploaded script file into plain text for analysis.

Plain text files are decoded as UTF-8. Final Draft (.fdx) files are parsed
and flattened to one line per paragraph, so the prompt carries the screenplay
text rather than its XML.
"""

import xml.etree.ElementTree as ET
import logging
import re
from typing import List, Optional

from fastapi import UploadFile

from script_analyzer.core.errors import FileReadError

logger = logging.getLogger(__name__)

UTF8_BOM = "\ufeff"
FDX_EXTENSIONS = (".fdx", ".xml")


class ScriptFileReader:
    """Turns uploaded .txt / .fdx bytes into script text."""

    @classmethod
    def decode_text(cls, data: bytes, filename: str) -> str:
        """Decode UTF-8 bytes, dropping a leading byte-order mark."""
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.error(f"Upload {filename} is not valid UTF-8: {e}")
            raise FileReadError(filename, str(e)) from e
        return text[1:] if text.startswith(UTF8_BOM) else text

    @classmethod
    def is_fdx(cls, filename: str) -> bool:
        return filename.lower().endswith(FDX_EXTENSIONS)

    @classmethod
    def extract_fdx_text(cls, fdx_content: str, filename: str) -> str:
        """
        Flatten FDX XML to screenplay text.

        Raises:
            FileReadError: If the XML is malformed or has no Content section
        """
        try:
            root = ET.fromstring(fdx_content)
        except ET.ParseError as e:
            logger.error(f"Invalid FDX format in {filename}: {e}")
            raise FileReadError(filename, f"Invalid FDX format: {e}") from e

        content = root.find('.//Content')
        if content is None:
            raise FileReadError(filename, "No Content section found in FDX file")

        # Handle both Content > Body > Paragraph and Content > Paragraph
        body = content.find('Body')
        paragraphs = (body if body is not None else content).findall('Paragraph')

        lines: List[str] = []
        for paragraph in paragraphs:
            line = cls._paragraph_line(paragraph)
            if line is not None:
                lines.append(line)
        return "\n".join(lines)

    @classmethod
    def _paragraph_line(cls, paragraph: ET.Element) -> Optional[str]:
        text = cls._extract_text_content(paragraph)
        if not text:
            return None

        xml_type = paragraph.get('Type', 'Action')
        if xml_type in ('Scene Heading', 'Character', 'Transition'):
            return text.upper()
        return text

    @classmethod
    def _extract_text_content(cls, paragraph: ET.Element) -> str:
        """
        Concatenate every <Text> run of a paragraph.

        FDX splits styled runs (bold, italic) into separate <Text> elements
        inside one paragraph.
        """
        text_parts = []
        for text_elem in paragraph.findall('Text'):
            text_parts.append(''.join(text_elem.itertext()))

        full_text = ''.join(text_parts)
        return re.sub(r'\s+', ' ', full_text).strip()

    @classmethod
    def read(cls, filename: str, data: bytes) -> str:
        """
        Read script text from uploaded file bytes.

        Raises:
            FileReadError: If the file cannot be decoded or parsed
        """
        text = cls.decode_text(data, filename)
        if cls.is_fdx(filename):
            return cls.extract_fdx_text(text, filename)
        return text

    @classmethod
    async def read_upload(cls, file: UploadFile, max_bytes: int) -> str:
        """
        Read a FastAPI upload into script text.

        Raises:
            FileReadError: If the file is too large, unreadable or unparseable
        """
        filename = file.filename or "upload"
        try:
            data = await file.read(max_bytes + 1)
        except OSError as e:
            logger.error(f"Failed to read upload {filename}: {e}")
            raise FileReadError(filename, str(e)) from e

        if len(data) > max_bytes:
            raise FileReadError(filename, f"File exceeds {max_bytes} bytes")

        return cls.read(filename, data)
