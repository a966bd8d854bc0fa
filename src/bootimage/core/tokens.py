"""
Shell word splitting for config values, using bashlex.

Config settings such as `run-command` are written as a single shell-style
string. Only a plain simple command is accepted.
"""

from __future__ import annotations

import bashlex
import bashlex.errors

# Word parts that would need a shell to evaluate
SUBSTITUTION_KINDS = frozenset({"commandsubstitution", "processsubstitution"})


def split_words(text: str) -> list[str]:
    """Split a shell string into words with quotes removed.

    Raises ValueError for anything other than a single simple command.
    """
    if not text or not text.strip():
        return []

    try:
        nodes = bashlex.parse(text)
    except (bashlex.errors.ParsingError, NotImplementedError) as e:
        raise ValueError(f"cannot parse {text!r}: {e}") from None

    if len(nodes) != 1 or nodes[0].kind != "command":
        raise ValueError(f"expected plain words, got {text!r}")

    words = []
    for part in nodes[0].parts:
        if part.kind == "redirect":
            raise ValueError(f"redirects not allowed: {text!r}")
        if part.kind not in ("word", "assignment"):
            raise ValueError(f"unsupported {part.kind} in {text!r}")
        for sub in getattr(part, "parts", []):
            if sub.kind in SUBSTITUTION_KINDS:
                raise ValueError(f"substitutions not allowed: {text!r}")
        words.append(part.word)
    return words
