from pathlib import Path

from sga_worker.exceptions import InferenceError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

CHALLENGE_PROMPT = "challenge_prompt.txt"
DOCUMENT_PROMPT = "document_prompt.txt"


def load_prompt(name: str, path: Path | None = None) -> str:
    """Load a prompt from a file.

    Args:
        name: File name inside the bundled prompts directory.
        path: Explicit path overriding the bundled file.

    Returns:
        The prompt text without surrounding whitespace.

    Raises:
        InferenceError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / name
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise InferenceError(f"Failed to load prompt {path.name}: {exc}") from exc
