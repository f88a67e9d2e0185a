"""Length-constrained script generation tests."""

import pytest

from conftest import PERSONA, FakeTextProvider, RecordingObserver, words
from personabrief.events import EventType
from personabrief.schemas import PersonaRecord
from personabrief.services.script import (
    MAX_SCRIPT_CHARS,
    ScriptService,
    ScriptVerdict,
    assess_script,
    clean_script,
    count_words,
    truncate_script,
)


@pytest.fixture
def persona() -> PersonaRecord:
    return PersonaRecord.model_validate(PERSONA)


def long_with_period_at(offset: int, length: int = 900) -> str:
    return "a" * offset + "." + "b" * (length - offset - 1)


class TestCleanScript:
    def test_strips_fence_with_language_tag(self):
        assert clean_script("```text\nHello designer.\n```") == "Hello designer."

    def test_strips_one_pair_of_edge_quotes(self):
        assert clean_script('"Hello designer."') == "Hello designer."
        assert clean_script("'Hello'") == "Hello"
        assert clean_script('""Hi""') == '"Hi"'

    def test_collapses_whitespace(self):
        assert clean_script("  Hello\n\n  designer,\tlisten.  ") == "Hello designer, listen."


class TestTruncateScript:
    def test_cuts_at_last_period_after_600(self):
        text = long_with_period_at(650)

        assert truncate_script(text) == text[:651]

    def test_hard_truncates_without_late_period(self):
        text = "x" * 900

        assert truncate_script(text) == "x" * 800

    def test_period_before_600_is_ignored(self):
        text = long_with_period_at(500)

        assert truncate_script(text) == text[:800]

    def test_uses_last_period_in_window(self):
        text = "a" * 620 + "." + "b" * 100 + "." + "c" * 300

        assert truncate_script(text) == text[:722]


class TestAssessScript:
    def test_accepts_in_range(self):
        assessment = assess_script(words(120))

        assert assessment.verdict is ScriptVerdict.ACCEPTED
        assert assessment.word_count == 120

    @pytest.mark.parametrize("n", [110, 150])
    def test_word_range_is_inclusive(self, n):
        assert assess_script(words(n)).verdict is ScriptVerdict.ACCEPTED

    @pytest.mark.parametrize("n", [0, 90, 109, 151])
    def test_out_of_range_needs_regeneration(self, n):
        assessment = assess_script(words(n))

        assert assessment.verdict is ScriptVerdict.NEEDS_REGENERATION
        assert assessment.word_count == n

    def test_character_ceiling_checked_before_words(self):
        # 120 words but well over 800 characters
        text = words(120, word="extraordinarily")

        assessment = assess_script(text)

        assert assessment.verdict is ScriptVerdict.TRUNCATED
        assert len(assessment.text) <= MAX_SCRIPT_CHARS


class TestScriptService:
    @pytest.mark.asyncio
    async def test_in_range_draft_returned_unchanged(self, persona):
        draft = words(120)
        provider = FakeTextProvider([draft])

        script = await ScriptService(provider).generate(persona)

        assert script == draft
        assert len(provider.prompts) == 1

    @pytest.mark.asyncio
    async def test_long_draft_truncated_at_sentence(self, persona, observer: RecordingObserver):
        draft = long_with_period_at(650)
        provider = FakeTextProvider([draft])

        script = await ScriptService(provider, observer=observer).generate(persona)

        assert script == draft[:651]
        assert len(provider.prompts) == 1
        assert observer.types() == [EventType.SCRIPT_TRUNCATED]

    @pytest.mark.asyncio
    async def test_long_draft_without_period_hard_truncated(self, persona):
        provider = FakeTextProvider(["x" * 900])

        script = await ScriptService(provider).generate(persona)

        assert script == "x" * 800

    @pytest.mark.asyncio
    async def test_short_draft_regenerated_once(self, persona, observer: RecordingObserver):
        retry = words(120, word="fine")
        provider = FakeTextProvider([words(90), retry])

        script = await ScriptService(provider, observer=observer).generate(persona)

        assert script == retry
        assert len(script) <= 800
        assert len(provider.prompts) == 2
        assert "previous attempt had 90 words" in provider.prompts[1]
        assert "previous attempt" not in provider.prompts[0]
        assert observer.types() == [EventType.SCRIPT_REGENERATED]

    @pytest.mark.asyncio
    async def test_out_of_range_retry_falls_back_to_original(self, persona):
        original = words(90)
        provider = FakeTextProvider([original, words(60, word="worse")])

        script = await ScriptService(provider).generate(persona)

        assert script == original
        assert len(provider.prompts) == 2

    @pytest.mark.asyncio
    async def test_retry_closer_to_range_still_loses(self, persona):
        original = words(90)
        provider = FakeTextProvider([original, words(109, word="close")])

        assert await ScriptService(provider).generate(persona) == original

    @pytest.mark.asyncio
    async def test_long_retry_is_truncated(self, persona):
        retry = long_with_period_at(700)
        provider = FakeTextProvider([words(200, word="go"), retry])

        script = await ScriptService(provider).generate(persona)

        assert script == retry[:701]

    @pytest.mark.asyncio
    async def test_retry_is_cleaned(self, persona):
        retry = "```\n" + words(115) + "\n```"
        provider = FakeTextProvider([words(20), retry])

        script = await ScriptService(provider).generate(persona)

        assert script == words(115)
        assert count_words(script) == 115

    @pytest.mark.asyncio
    async def test_prompt_carries_persona(self, persona):
        provider = FakeTextProvider([words(120)])

        await ScriptService(provider).generate(persona)

        assert "The Pragmatic Fintech Lead" in provider.prompts[0]
        assert "MAXIMUM 700 characters" in provider.prompts[0]

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, persona):
        provider = FakeTextProvider([words(90), RuntimeError("connection reset")])

        with pytest.raises(RuntimeError):
            await ScriptService(provider).generate(persona)
