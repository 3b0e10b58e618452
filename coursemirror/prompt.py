"""Interactive yes/no confirmation used by the CLI."""

from typing import Callable, Optional

CACHE_QUESTION = "Do you want to use cached files when possible? [Y/n] "


def ask_yes_no(question: str, input_fn: Optional[Callable[[str], str]] = None) -> bool:
    """Ask a yes/no question until the answer is understood.

    An empty answer or "y" means yes, "n" means no (case-insensitive).
    Anything else repeats the question.
    """
    if input_fn is None:
        input_fn = input

    while True:
        answer = input_fn(question).strip()
        lowered = answer.lower()
        if lowered in ("", "y"):
            return True
        if lowered == "n":
            return False
        print(f'Invalid option "{answer}". Try again.')


def ask_use_cache(input_fn: Optional[Callable[[str], str]] = None) -> bool:
    return ask_yes_no(CACHE_QUESTION, input_fn)
