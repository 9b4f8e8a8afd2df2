"""Transcript → command resolution.

Order of precedence: exact phrase, then containment, then whole-word
overlap. Word overlap compares exact tokens only, so "product" and
"products" do not match each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

EXACT = "exact"
CONTAINMENT = "containment"
FUZZY = "fuzzy"

PAGE = "page"
GLOBAL = "global"


@dataclass
class VoiceCommand:
    command: str
    action: Callable[[], Any]
    phrases: list[str] = field(default_factory=list)

    def all_phrases(self) -> list[str]:
        return [self.command, *self.phrases]


@dataclass
class CommandMatch:
    command: VoiceCommand
    score: float
    kind: str
    scope: str
    transcript: str
    result: Any = None
    error: str | None = None


def normalize(text: str) -> str:
    return " ".join(text.strip().lower().split())


def _words(text: str) -> list[str]:
    return [w for w in text.split() if len(w) > 1]


def similarity(a: str, b: str) -> float:
    a, b = normalize(a), normalize(b)
    if not a or not b:
        return 0.0
    if a in b or b in a:
        return 0.9
    words_a, words_b = _words(a), _words(b)
    if not words_a or not words_b:
        return 0.0
    shared = sum(1 for w in words_a if w in words_b)
    return shared / max(len(words_a), len(words_b))


def _exact(text: str, commands: list[VoiceCommand]) -> VoiceCommand | None:
    for cmd in commands:
        if any(normalize(p) == text for p in cmd.all_phrases()):
            return cmd
    return None


def resolve_command(
    transcript: str,
    page_commands: list[VoiceCommand],
    global_commands: list[VoiceCommand],
    threshold: float = 0.7,
) -> CommandMatch | None:
    """Pick the command a transcript refers to, or ``None``."""
    text = normalize(transcript)
    if not text:
        return None

    for scope, commands in ((PAGE, page_commands), (GLOBAL, global_commands)):
        cmd = _exact(text, commands)
        if cmd is not None:
            return CommandMatch(cmd, 1.0, EXACT, scope, transcript)

    candidates: list[CommandMatch] = []
    for scope, commands in ((PAGE, page_commands), (GLOBAL, global_commands)):
        for cmd in commands:
            primary = normalize(cmd.command)
            if primary and primary in text:
                score = 0.95 if scope == PAGE else 0.9
                candidates.append(CommandMatch(cmd, score, CONTAINMENT, scope, transcript))
                continue
            alternates = [normalize(p) for p in cmd.phrases]
            if any(p and p in text for p in alternates):
                candidates.append(CommandMatch(cmd, 0.9, CONTAINMENT, scope, transcript))
                continue
            score = max(similarity(text, p) for p in cmd.all_phrases())
            if score >= threshold:
                candidates.append(CommandMatch(cmd, score, FUZZY, scope, transcript))

    if not candidates:
        return None
    # sorted() is stable: page commands were discovered first and win ties
    return sorted(candidates, key=lambda m: -m.score)[0]
