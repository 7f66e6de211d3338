"""Tests for plain-text export and the export package helpers."""

from __future__ import annotations

import pytest

from ats_optimizer.export import (
    DEFAULT_BASENAME,
    export_filename,
    export_sections,
    render_bytes,
)
from ats_optimizer.export.txt_exporter import render_txt
from ats_optimizer.models.resume import ResumeSection


class TestRenderTxt:
    def test_title_underline_and_bullets(self):
        sections = [
            ResumeSection(id="a", title="Summary", content="<b>Engineer</b> with 5 years"),
            ResumeSection(id="b", title="Skills", content="<ul><li>Python</li><li>SQL</li></ul>"),
        ]
        assert render_txt(sections) == (
            "SUMMARY\n=======\nEngineer with 5 years\n\n"
            "SKILLS\n======\n• Python\n• SQL\n\n"
        )

    def test_section_order_preserved(self, sample_sections):
        text = render_txt(sample_sections)
        positions = [text.index(s.title.upper()) for s in sample_sections]
        assert positions == sorted(positions)

    def test_empty_content_keeps_heading(self):
        assert render_txt([ResumeSection(id="a", title="Projects")]) == "PROJECTS\n========\n\n\n"

    def test_no_sections(self):
        assert render_txt([]) == ""


class TestExportHelpers:
    def test_default_filename(self):
        assert export_filename("pdf") == f"{DEFAULT_BASENAME}.pdf"
        assert DEFAULT_BASENAME == "ATS_Optimized_Resume"

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unsupported export format"):
            export_filename("rtf")
        with pytest.raises(ValueError):
            render_bytes([], "rtf")

    def test_render_bytes_txt_is_utf8(self, sample_sections):
        assert render_bytes(sample_sections, "txt") == render_txt(sample_sections).encode("utf-8")

    @pytest.mark.parametrize("fmt", ["txt", "pdf", "docx"])
    def test_export_sections_writes_file(self, tmp_path, sample_sections, fmt):
        path = export_sections(sample_sections, fmt, tmp_path / "out", basename="cv")
        assert path == tmp_path / "out" / f"cv.{fmt}"
        assert path.stat().st_size > 0
