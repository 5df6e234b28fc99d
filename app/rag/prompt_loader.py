from pathlib import Path

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_system_prompt(path: Path | None = None) -> str:
    """Load the system prompt used for grounded answers.

    Args:
        path: Path to the prompt file.
              Defaults to the bundled system_prompt.txt.

    Raises:
        OSError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "system_prompt.txt"
    return path.read_text(encoding="utf-8").strip()
