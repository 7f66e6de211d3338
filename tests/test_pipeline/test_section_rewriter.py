"""Tests for SectionRewriter with a mocked LLM."""

import asyncio

import pytest

from ats_optimizer.errors import RewriteError
from ats_optimizer.models.match import ImprovedContent
from ats_optimizer.models.resume import ResumeSection
from ats_optimizer.pipeline.section_rewriter import (
    SECTION_RULES,
    SectionRewriter,
    section_kind,
)


def _dispatch_by_title(fail_titles=()):
    """side_effect returning both variants, or raising for ``fail_titles``."""

    async def _side_effect(*, prompt, **kwargs):
        title = prompt.split('"')[1]
        if title in fail_titles:
            raise RuntimeError(f"model error for {title}")
        return {"professional": f"pro {title}", "ats_optimized": f"ats {title}"}

    return _side_effect


@pytest.mark.parametrize(
    "title,kind",
    [
        ("Professional Summary", "summary"),
        ("Profile", "summary"),
        ("About Me", "summary"),
        ("Work Experience", "experience"),
        ("Employment History", "experience"),
        ("Education", "general"),
        ("Skills", "general"),
    ],
)
def test_section_kind(title, kind):
    assert section_kind(title) == kind


class TestImprove:
    async def test_returns_both_variants(self, mock_llm_client):
        mock_llm_client.generate_json.side_effect = _dispatch_by_title()
        improved = await SectionRewriter(mock_llm_client).improve("Summary", "text")
        assert improved == ImprovedContent(professional="pro Summary", ats_optimized="ats Summary")

    async def test_prompt_uses_section_rules(self, mock_llm_client):
        mock_llm_client.generate_json.side_effect = _dispatch_by_title()
        await SectionRewriter(mock_llm_client).improve("Experience", "<ul><li>Did work</li></ul>")
        prompt = mock_llm_client.generate_json.call_args.kwargs["prompt"]
        assert SECTION_RULES["experience"] in prompt
        assert "<ul><li>Did work</li></ul>" in prompt

    async def test_incomplete_reply(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = {"professional": "only one"}
        with pytest.raises(RewriteError, match="Could not rewrite the Skills section"):
            await SectionRewriter(mock_llm_client).improve("Skills", "Python")


class TestRewriteSection:
    async def test_selects_mode_and_snapshots(self, mock_llm_client, sample_sections):
        mock_llm_client.generate_json.side_effect = _dispatch_by_title()
        rewritten = await SectionRewriter(mock_llm_client).rewrite_section(
            sample_sections[0], "professional"
        )
        assert rewritten.content == "pro Summary"
        assert rewritten.original_content == sample_sections[0].content

    async def test_second_rewrite_keeps_first_original(self, mock_llm_client, sample_sections):
        mock_llm_client.generate_json.side_effect = _dispatch_by_title()
        rewriter = SectionRewriter(mock_llm_client)
        once = await rewriter.rewrite_section(sample_sections[0], "professional")
        twice = await rewriter.rewrite_section(once, "ats_optimized")
        assert twice.content == "ats Summary"
        assert twice.original_content == sample_sections[0].content

    async def test_invalid_mode(self, mock_llm_client, sample_sections):
        with pytest.raises(RewriteError, match="Unknown rewrite mode"):
            await SectionRewriter(mock_llm_client).rewrite_section(sample_sections[0], "casual")
        mock_llm_client.generate_json.assert_not_called()


class TestRewriteAll:
    async def test_rewrites_every_section(self, mock_llm_client, sample_sections):
        mock_llm_client.generate_json.side_effect = _dispatch_by_title()
        result = await SectionRewriter(mock_llm_client).rewrite_all(sample_sections, "ats_optimized")

        assert [s.content for s in result] == ["ats Summary", "ats Experience", "ats Skills"]
        assert mock_llm_client.generate_json.await_count == 3

    async def test_failed_section_keeps_content(self, mock_llm_client, sample_sections):
        mock_llm_client.generate_json.side_effect = _dispatch_by_title(fail_titles={"Experience"})
        result = await SectionRewriter(mock_llm_client).rewrite_all(sample_sections, "professional")

        assert [s.id for s in result] == ["s1", "s2", "s3"]
        assert result[0].content == "pro Summary"
        assert result[1] == sample_sections[1]
        assert result[1].original_content is None
        assert result[2].content == "pro Skills"

    async def test_all_failures_leave_sections_unchanged(self, mock_llm_client, sample_sections):
        mock_llm_client.generate_json.side_effect = RuntimeError("down")
        result = await SectionRewriter(mock_llm_client).rewrite_all(sample_sections, "professional")
        assert result == sample_sections

    async def test_empty_sequence(self, mock_llm_client):
        assert await SectionRewriter(mock_llm_client).rewrite_all([], "professional") == []

    async def test_invalid_mode_before_any_call(self, mock_llm_client, sample_sections):
        with pytest.raises(RewriteError):
            await SectionRewriter(mock_llm_client).rewrite_all(sample_sections, "bold")
        mock_llm_client.generate_json.assert_not_called()

    async def test_rewritten_sections_remember_original(self, mock_llm_client):
        sections = [ResumeSection(id="a", title="Summary", content="old", original_content="first")]
        mock_llm_client.generate_json.side_effect = _dispatch_by_title()
        result = await SectionRewriter(mock_llm_client).rewrite_all(sections, "professional")
        assert result[0].original_content == "first"

    async def test_calls_are_in_flight_together(self, mock_llm_client, sample_sections):
        all_started = asyncio.Event()
        started = 0

        async def _wait_for_all(*, prompt, **kwargs):
            nonlocal started
            started += 1
            if started == len(sample_sections):
                all_started.set()
            # a sequential dispatch never reaches the last call and times out here
            await asyncio.wait_for(all_started.wait(), timeout=1)
            title = prompt.split('"')[1]
            return {"professional": f"pro {title}", "ats_optimized": f"ats {title}"}

        mock_llm_client.generate_json.side_effect = _wait_for_all
        result = await SectionRewriter(mock_llm_client).rewrite_all(sample_sections, "professional")
        assert [s.content for s in result] == ["pro Summary", "pro Experience", "pro Skills"]

    async def test_dispatch_failure_raises_rewrite_error(
        self, mock_llm_client, sample_sections, monkeypatch
    ):
        rewriter = SectionRewriter(mock_llm_client)

        async def _broken(section, mode):
            raise RuntimeError("scheduler down")

        monkeypatch.setattr(rewriter, "_attempt", _broken)
        with pytest.raises(RewriteError, match="rewrite engine failed") as excinfo:
            await rewriter.rewrite_all(sample_sections, "professional")
        assert isinstance(excinfo.value.__cause__, RuntimeError)
