"""
Unit tests for services.chat prompt construction.
"""
import datetime as dt
from types import SimpleNamespace

from app.models.chat_message import ChatRole
from app.services.chat import NOT_SUBMITTED, build_prompt, strip_html


def _goal(results: str = ""):
    return SimpleNamespace(
        goals_content="<p>Ship <b>v2</b></p><ul><li>Write docs</li></ul>",
        results_content=results,
        week_start=dt.date(2024, 6, 3),
        week_end=dt.date(2024, 6, 9),
    )


def _msg(role: ChatRole, content: str):
    return SimpleNamespace(role=role, content=content)


class TestStripHtml:

    def test_tags_become_single_spaces(self):
        assert strip_html("<p>Ship <b>v2</b></p><ul><li>Write docs</li></ul>") == "Ship v2 Write docs"

    def test_whitespace_is_collapsed_and_trimmed(self):
        assert strip_html("  a\n\n\tb  ") == "a b"

    def test_plain_text_is_unchanged(self):
        assert strip_html("no markup here") == "no markup here"

    def test_empty(self):
        assert strip_html("") == ""


class TestBuildPrompt:

    def test_without_history_or_results(self):
        prompt = build_prompt(_goal(), [], "How am I doing?")

        assert prompt.startswith(
            "You are an AI assistant helping to analyze weekly goals and results for an OKR "
            "(Objectives and Key Results) tracking system.\n\n"
        )
        assert "Week Period: Mon Jun 03 2024 to Sun Jun 09 2024\n\n" in prompt
        assert "Goals for this week:\nShip v2 Write docs\n\n" in prompt
        assert f"Results submitted:\n{NOT_SUBMITTED}\n\n" in prompt
        assert "Previous conversation:" not in prompt
        assert "\nUser's current question: How am I doing?\n\n" in prompt
        assert prompt.endswith("Keep your response concise and actionable.")

    def test_history_is_rendered_in_order(self):
        history = [
            _msg(ChatRole.USER, "What slipped?"),
            _msg(ChatRole.ASSISTANT, "The docs."),
            _msg(ChatRole.USER, "Why?"),
        ]
        prompt = build_prompt(_goal("<p>Shipped v2</p>"), history, "Why?")

        assert "Results submitted:\nShipped v2\n\n" in prompt
        assert (
            "\n\n\nPrevious conversation:\n"
            "User: What slipped?\n"
            "Assistant: The docs.\n"
            "User: Why?\n"
            "\nUser's current question: Why?"
        ) in prompt

    def test_focus_list_is_present(self):
        prompt = build_prompt(_goal(), [], "q")
        for line in (
            "- Analyzing progress and achievements",
            "- Identifying patterns or areas for improvement",
            "- Providing constructive feedback",
            "- Answering specific questions about the data",
        ):
            assert line in prompt
