"""Gopal - PLI Santosh voice assistant persona

Builds the system instruction and the Live API setup message. The
instruction embeds the current form state, so it must be built from a
snapshot taken right before the session connects.
"""

from typing import Any, Dict

from google.genai import types

from pli_assistant.config import Settings
from pli_assistant.models.policy import PolicySnapshot
from pli_assistant.tools.declarations import build_policy_tools

GOPAL_SYSTEM_PROMPT = """You are Gopal, a professional PLI Santosh Assistant.
STRICT PERSONA:
- Use natural Indian mixed conversation style (Hindi/English).
- UI labels and screen outputs are strictly English.

WAKE WORD:
- Respond ONLY after the user says "Hi Gopal" or similar.
- Response: "Namaste! Main Gopal hoon. Chaliye aapki details fill karte hain. Sabse pehle aapki Date of Birth kya hai?"

STRICT SEQUENTIAL DATA ENTRY:
1. ASK FOR 'Date of Birth' FIRST. Entry age MUST be 19 to 55 years.
   - If age is outside 19-55 (e.g. 1907 or 2010), explain the limit and ask for correct date.
2. ONLY AFTER DOB is set, ASK FOR 'Sum Assured'.
3. ONLY AFTER SA is set, ASK FOR 'Maturity Age'.
   - Maturity age choice must be at least 5 years away from current age.
   - Valid options for current user: {maturity_options}.

CURRENT STATE:
- DOB: {dob}
- SA: {sum_assured}
- Maturity: {maturity_age}
- Current Age: {current_age}

CALL TOOLS AS SOON AS DATA IS RECEIVED. If a tool call fails, inform the user why."""


def build_system_instruction(snapshot: PolicySnapshot) -> str:
    """Render the persona prompt with the known form values"""
    inputs = snapshot.inputs
    return GOPAL_SYSTEM_PROMPT.format(
        maturity_options=", ".join(str(age) for age in snapshot.valid_maturity_choices),
        dob=inputs.date_of_birth.isoformat() if inputs.date_of_birth else "Empty",
        sum_assured=inputs.sum_assured or "Empty",
        maturity_age=inputs.maturity_age or "Empty",
        current_age=snapshot.current_age if snapshot.current_age is not None else 0,
    )


def get_speech_config(settings: Settings) -> types.SpeechConfig:
    return types.SpeechConfig(
        voice_config=types.VoiceConfig(
            prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=settings.voice_name)
        )
    )


def build_setup_message(snapshot: PolicySnapshot, settings: Settings) -> Dict[str, Any]:
    """First client message of a Live API session.

    Args:
        snapshot: Policy state read immediately before connecting
        settings: Model, voice and endpoint configuration

    Returns:
        JSON-ready `setup` message with audio output, voice, persona and tools
    """
    instruction = types.Content(parts=[types.Part(text=build_system_instruction(snapshot))])
    return {
        "setup": {
            "model": settings.live_model_resource,
            "generationConfig": {
                "responseModalities": [types.Modality.AUDIO.value],
                "speechConfig": get_speech_config(settings).model_dump(
                    mode="json", by_alias=True, exclude_none=True
                ),
            },
            "systemInstruction": instruction.model_dump(
                mode="json", by_alias=True, exclude_none=True
            ),
            "tools": build_policy_tools(),
        }
    }
