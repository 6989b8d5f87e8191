"""
Prompts for meal analysis.

Providers are only contracted to return text, so the expected JSON shape
is embedded in every instruction. Gemini receives the instruction as a
single text part; chat providers get a system instruction plus a user
turn holding the image reference.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from mealscan.domain.meal.recognition.models import AnalysisMode, MediaInput


# ═══════════════════════════════════════════════════════════
# OUTPUT SHAPES (embedded in the instructions)
# ═══════════════════════════════════════════════════════════

_EXAMPLE_ITEM: Dict[str, Any] = {
    "name": "Food name",
    "grams": 100,
    "calories": 0,
    "protein": 0,
    "carbs": 0,
    "fat": 0,
}

ITEMS_OUTPUT_SHAPE: Dict[str, Any] = {"items": [_EXAMPLE_ITEM], "confidence": 0.9}

OPTIONS_OUTPUT_SHAPE: Dict[str, Any] = {"options": [_EXAMPLE_ITEM]}


def _shape(example: Dict[str, Any]) -> str:
    return json.dumps(example, separators=(",", ":"))


# ═══════════════════════════════════════════════════════════
# INSTRUCTIONS
# ═══════════════════════════════════════════════════════════

IMAGE_INSTRUCTION = (
    "You are a nutritionist. Analyze the image and identify the foods, "
    "estimate the weight (in grams) and calculate calories and macros. "
    f"Return ONLY a JSON: {_shape(ITEMS_OUTPUT_SHAPE)}"
)

AUDIO_INSTRUCTION = (
    "You are a nutritionist. Analyze the audio describing the meal. "
    "Identify the foods mentioned, estimate the weight (in grams) when it is "
    "not specified (use average portions), and calculate calories and macros. "
    f"Return ONLY a JSON: {_shape(ITEMS_OUTPUT_SHAPE)}"
)

AUDIO_SEARCH_INSTRUCTION = (
    "You are a nutritionist. Analyze the audio. If the user listed several "
    'foods (e.g. "rice, beans and chicken"), identify each one separately '
    "with its estimated macros for an average portion. If the user said a "
    'single generic food (e.g. "apple"), provide 3 to 5 common variations '
    f"or sizes. Return ONLY a JSON: {_shape(OPTIONS_OUTPUT_SHAPE)}."
)

CHAT_IMAGE_SYSTEM_PROMPT = (
    "You are an expert nutritionist. Identify the foods in the image, "
    "visually estimate the weight in grams and calculate calories and "
    "macros. Return ONLY strict JSON in the following format, without "
    "markdown or explanations: "
    '{"items":[{"name":"food name","grams":150,"calories":200,'
    '"protein":30,"carbs":10,"fat":5}],"confidence":0.95}'
)

CHAT_IMAGE_USER_TEXT = "Analyze this plate."


@dataclass(frozen=True)
class AnalysisPrompt:
    """
    Provider-agnostic instruction plus the result key it asks for.

    Attributes:
        instruction: Full instruction text (sent verbatim to Gemini)
        system_prompt: System message for chat-based providers
        user_text: Short text accompanying the media in the user turn
        result_key: "items" or "options"
    """

    instruction: str
    system_prompt: str
    user_text: str
    result_key: str

    @property
    def expects_options(self) -> bool:
        return self.result_key == "options"


def build_prompt(media: MediaInput, mode: AnalysisMode) -> AnalysisPrompt:
    """Pick the instruction for the submitted media and mode.

    Example:
        >>> prompt = build_prompt(audio_media, AnalysisMode.SEARCH)
        >>> prompt.result_key
        'options'
    """
    if media.is_audio:
        if mode == AnalysisMode.SEARCH:
            return AnalysisPrompt(
                instruction=AUDIO_SEARCH_INSTRUCTION,
                system_prompt=AUDIO_SEARCH_INSTRUCTION,
                user_text="List the foods mentioned in this recording.",
                result_key="options",
            )
        return AnalysisPrompt(
            instruction=AUDIO_INSTRUCTION,
            system_prompt=AUDIO_INSTRUCTION,
            user_text="Analyze the meal described in this recording.",
            result_key="items",
        )
    return AnalysisPrompt(
        instruction=IMAGE_INSTRUCTION,
        system_prompt=CHAT_IMAGE_SYSTEM_PROMPT,
        user_text=CHAT_IMAGE_USER_TEXT,
        result_key="items",
    )


def build_chat_messages(prompt: AnalysisPrompt, image_url: str) -> List[Dict[str, Any]]:
    """Build the message array for chat-completion providers.

    Args:
        prompt: Prompt built by ``build_prompt``
        image_url: Data URI (or public URL) of the meal image

    Returns:
        System message followed by a user turn with text and image
    """
    return [
        {"role": "system", "content": prompt.system_prompt},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt.user_text},
                {"type": "image_url", "image_url": {"url": image_url}},
            ],
        },
    ]
