"""Prompt templates and response schemas for the provider tasks."""

TRANSCRIPTION_SYSTEM = """\
Role: English Coach.
Task: Transcribe audio (en-US), merge fillers, and improve the user's English.
IMPORTANT: Return strict JSON only. Escape all double quotes inside strings.
Output JSON ONLY:
{
  "language": "en-US",
  "meta": { "wordCount": number, "estimatedLevel": "string", "speed": "string" },
  "segments": [
    {
      "start": number, "end": number,
      "text": "Original text (combine short phrases)",
      "translation": "Chinese translation",
      "idiomatic": "Rewrite the original text to sound like a native American speaker \
(natural, colloquial or professional as appropriate).",
      "idiomExplanation": "Brief Chinese explanation of the improvement \
(e.g. better word choice)."
    }
  ]
}
"""

TRANSCRIPTION_USER = "Generate JSON."

SCORE_USER = """\
Listen to this user recording and compare it to the text: "{reference_text}".
Grade the pronunciation accuracy from 0 to 100.
Provide brief feedback.
Return JSON: {{ score: number, feedback: string, accuracy: 'good'|'average'|'poor' }}
"""

DEFINITION_USER = (
    'Define "{word}" in context: "{context}". '
    "Return JSON with: word, definition (English), example, phonetic."
)

DEFINITION_FALLBACK_SYSTEM = "You are an English dictionary API. Output purely JSON."

TRANSCRIPTION_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "language": {"type": "string"},
        "meta": {
            "type": "object",
            "properties": {
                "wordCount": {"type": "number"},
                "estimatedLevel": {"type": "string"},
                "speed": {"type": "string"},
            },
        },
        "segments": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "start": {"type": "number"},
                    "end": {"type": "number"},
                    "text": {"type": "string"},
                    "translation": {"type": "string"},
                    "idiomatic": {"type": "string"},
                    "idiomExplanation": {"type": "string"},
                },
                "required": [
                    "start",
                    "end",
                    "text",
                    "translation",
                    "idiomatic",
                    "idiomExplanation",
                ],
            },
        },
    },
    "required": ["language", "segments", "meta"],
}

SCORE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "score": {"type": "number"},
        "feedback": {"type": "string"},
        "accuracy": {"type": "string", "enum": ["good", "average", "poor"]},
    },
    "required": ["score", "feedback", "accuracy"],
}

DEFINITION_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "word": {"type": "string"},
        "definition": {"type": "string"},
        "example": {"type": "string"},
        "phonetic": {"type": "string"},
    },
    "required": ["word", "definition", "example"],
}


def json_schema_format(name: str, schema: dict) -> dict:
    """Wrap a JSON schema as an OpenAI-style ``response_format`` value."""
    return {"type": "json_schema", "json_schema": {"name": name, "schema": schema}}


def format_definition_prompt(word: str, context: str) -> str:
    return DEFINITION_USER.format(word=word, context=context)


def format_score_prompt(reference_text: str) -> str:
    return SCORE_USER.format(reference_text=reference_text)
