"""
Unit tests for ScriptFileReader.
"""

import io

import pytest
from fastapi import UploadFile

from script_analyzer.core.errors import FileReadError
from script_analyzer.services.script_file_reader import ScriptFileReader

SAMPLE_FDX = """<?xml version="1.0" encoding="UTF-8" standalone="no" ?>
<FinalDraft DocumentType="Script" Template="No" Version="5">
  <Content>
    <Paragraph Type="Scene Heading">
      <Text>int. kitchen - night</Text>
    </Paragraph>
    <Paragraph Type="Action">
      <Text>Rain hammers the window. </Text><Text AdornmentStyle="-1">Ada</Text><Text> waits.</Text>
    </Paragraph>
    <Paragraph Type="Character">
      <Text>ada</Text>
    </Paragraph>
    <Paragraph Type="Dialogue">
      <Text>He's late.</Text>
    </Paragraph>
    <Paragraph Type="Action">
      <Text>   </Text>
    </Paragraph>
    <Paragraph Type="Transition">
      <Text>cut to:</Text>
    </Paragraph>
  </Content>
</FinalDraft>
"""


class TestPlainText:

    def test_utf8_text(self):
        text = "INT. ROOM - DAY\n\n角色：你好"
        assert ScriptFileReader.read("pilot.txt", text.encode("utf-8")) == text

    def test_bom_is_stripped(self):
        data = "\ufeffINT. ROOM".encode("utf-8")
        assert ScriptFileReader.read("pilot.txt", data) == "INT. ROOM"

    def test_invalid_utf8_names_the_file(self):
        with pytest.raises(FileReadError) as exc_info:
            ScriptFileReader.read("pilot.txt", b"\xff\xfe\x00bad")
        assert exc_info.value.message == "Failed to read the file: pilot.txt"
        assert exc_info.value.filename == "pilot.txt"


class TestFdx:

    def test_fdx_is_flattened(self):
        text = ScriptFileReader.read("Pilot.FDX", SAMPLE_FDX.encode("utf-8"))
        assert text.split("\n") == [
            "INT. KITCHEN - NIGHT",
            "Rain hammers the window. Ada waits.",
            "ADA",
            "He's late.",
            "CUT TO:",
        ]

    def test_fdx_with_body_element(self):
        fdx = (
            "<FinalDraft><Content><Body>"
            '<Paragraph Type="Action"><Text>Inside body.</Text></Paragraph>'
            "</Body></Content></FinalDraft>"
        )
        assert ScriptFileReader.read("x.fdx", fdx.encode("utf-8")) == "Inside body."

    def test_malformed_fdx(self):
        with pytest.raises(FileReadError, match="broken.fdx"):
            ScriptFileReader.read("broken.fdx", b"<FinalDraft><Content>")

    def test_fdx_without_content(self):
        with pytest.raises(FileReadError) as exc_info:
            ScriptFileReader.read("empty.fdx", b"<FinalDraft></FinalDraft>")
        assert "No Content section" in exc_info.value.reason


class TestReadUpload:

    @pytest.mark.asyncio
    async def test_reads_upload(self):
        upload = UploadFile(file=io.BytesIO(b"FADE IN:"), filename="short.txt")
        assert await ScriptFileReader.read_upload(upload, max_bytes=100) == "FADE IN:"

    @pytest.mark.asyncio
    async def test_oversize_upload(self):
        upload = UploadFile(file=io.BytesIO(b"x" * 101), filename="long.txt")
        with pytest.raises(FileReadError, match="long.txt"):
            await ScriptFileReader.read_upload(upload, max_bytes=100)
