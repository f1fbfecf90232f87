"""
Tests for the Gopal persona prompt and the Live API setup message.

Test Coverage:
- Prompt embeds the current form state, "Empty" for unset values
- Maturity options follow the current age
- Setup message requests audio with the configured voice and the three tools
"""

import pytest

from conftest import DOB_AGE_38
from pli_assistant.agents.gopal_agent import (
    build_setup_message,
    build_system_instruction,
    get_speech_config,
)
from pli_assistant.config import Settings


@pytest.fixture
def settings():
    return Settings(gemini_api_key="test-key", voice_name="Puck")


class TestSystemInstruction:
    def test_empty_form(self, store):
        prompt = build_system_instruction(store.snapshot())

        assert "You are Gopal" in prompt
        assert "Hi Gopal" in prompt
        assert "- DOB: Empty" in prompt
        assert "- SA: Empty" in prompt
        assert "- Maturity: Empty" in prompt
        assert "- Current Age: 0" in prompt
        assert "35, 40, 45, 50, 55, 58, 60" in prompt

    def test_filled_form(self, store):
        store.set_date_of_birth(DOB_AGE_38)
        store.set_sum_assured(100000)

        prompt = build_system_instruction(store.snapshot())

        assert "- DOB: 1988-01-15" in prompt
        assert "- SA: 100000" in prompt
        assert "- Maturity: 60" in prompt
        assert "- Current Age: 38" in prompt
        assert "Valid options for current user: 45, 50, 55, 58, 60." in prompt

    def test_sequential_entry_rules(self, store):
        prompt = build_system_instruction(store.snapshot())

        dob = prompt.index("ASK FOR 'Date of Birth' FIRST")
        sa = prompt.index("ASK FOR 'Sum Assured'")
        maturity = prompt.index("ASK FOR 'Maturity Age'")
        assert dob < sa < maturity


class TestSetupMessage:
    def test_model_resource_name(self, store, settings):
        setup = build_setup_message(store.snapshot(), settings)["setup"]
        assert setup["model"] == f"models/{settings.live_model}"

    def test_audio_response_with_voice(self, store, settings):
        generation = build_setup_message(store.snapshot(), settings)["setup"]["generationConfig"]

        assert generation["responseModalities"] == ["AUDIO"]
        voice = generation["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]
        assert voice["voiceName"] == "Puck"

    def test_system_instruction_part(self, store, settings):
        setup = build_setup_message(store.snapshot(), settings)["setup"]
        text = setup["systemInstruction"]["parts"][0]["text"]
        assert text == build_system_instruction(store.snapshot())

    def test_tools_included(self, store, settings):
        setup = build_setup_message(store.snapshot(), settings)["setup"]
        names = [d["name"] for d in setup["tools"][0]["functionDeclarations"]]
        assert names == ["set_date_of_birth", "set_sum_assured", "set_maturity_age"]

    def test_speech_config_voice(self):
        config = get_speech_config(Settings(voice_name="Kore"))
        assert config.voice_config.prebuilt_voice_config.voice_name == "Kore"
