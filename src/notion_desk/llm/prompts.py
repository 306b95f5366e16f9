"""Prompt templates for transcription, voice-note cleanup and page chat.

Model name stored as constant for preview model management.
"""

# Gemini model constant -- update here when stable version releases
GEMINI_MODEL = "gemini-3-flash-preview"

SUMMARIZE_PROMPT = "Summarize these Notion pages:"

EXTRACT_TASKS_PROMPT = (
    "Extract all tasks (todo items) from these notion pages and format them "
    "into a markdown task list:"
)

VOICE_NOTE_SYSTEM_PROMPT = """\
You are a helpful assistant that cleans up transcriptions.
Please remove any unnecessary filler words, pauses, or repetitions from the transcription.
Your response should be in markdown format with an H1 at the top acting as the title of the transcription.
The title should be concise and relevant to the content of the transcription.
The content should be clear and easy to read, maintaining the original meaning while improving clarity.
"""

_TRANSCRIBE_INSTRUCTION = (
    "Transcribe this audio recording as accurately as possible. "
    "Output only the transcript text, nothing else."
)


def build_transcription_prompt(base_prompt: str = "") -> str:
    """Transcription instruction, optionally preceded by vocabulary/context hints."""
    if base_prompt.strip():
        return f"Context: {base_prompt.strip()}\n\n---\n{_TRANSCRIBE_INSTRUCTION}"
    return _TRANSCRIBE_INSTRUCTION


def build_voice_note_message(transcript: str) -> str:
    """User message asking for a cleaned-up version of a transcript."""
    return f"Please clean up the following transcription:\n\n{transcript}"


def build_selection_prompt(prompt: str, sections: list[tuple[str, str]]) -> str:
    """Assemble one chat prompt from an instruction and (title, markdown) sections.

    Sections are rendered as "## <title>" blocks separated by horizontal rules.
    """
    body = "\n\n---\n\n".join(f"## {title}\n\n{markdown}" for title, markdown in sections)
    return f"{prompt}\n\n{body}"
