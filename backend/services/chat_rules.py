"""
Keyword-matching helper for the wheelchair questions chat.

Rules are tried in file order and so are the keywords inside a rule; the
first keyword found anywhere in the lower-cased question wins.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Sequence, Tuple

from pydantic import BaseModel, TypeAdapter, ValidationError

from settings import settings

logger = logging.getLogger(__name__)

GREETING = "Hello! How can I help you with your wheelchair questions today?"
FALLBACK_ANSWER = (
    "I'm sorry, I don't have information on that specific topic right now. "
    "Could you please rephrase your question?"
)


class ChatRulesError(Exception):
    """The rules file is missing or not shaped like a list of rules."""


class _ChatRuleRecord(BaseModel):
    keywords: List[str]
    answer: str


@dataclass(frozen=True)
class ChatRule:
    keywords: Tuple[str, ...]
    answer: str


def find_answer(rules: Sequence[ChatRule], user_input: str) -> str:
    lower_input = user_input.lower()
    if not lower_input.strip():
        return FALLBACK_ANSWER
    for rule in rules:
        for keyword in rule.keywords:
            if keyword.lower() in lower_input:
                return rule.answer
    return FALLBACK_ANSWER


def load_chat_rules(path: Path) -> List[ChatRule]:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ChatRulesError(f"cannot read chat rules from {path}: {exc}") from exc
    try:
        records = TypeAdapter(List[_ChatRuleRecord]).validate_python(raw)
    except ValidationError as exc:
        raise ChatRulesError(f"malformed chat rules in {path}: {exc}") from exc

    rules = [ChatRule(keywords=tuple(r.keywords), answer=r.answer) for r in records]
    logger.info("Loaded %d chat rules from %s", len(rules), path)
    return rules


@lru_cache(maxsize=1)
def get_default_chat_rules() -> Tuple[ChatRule, ...]:
    """Rules from CHAT_RULES_PATH, read once per process."""
    return tuple(load_chat_rules(settings.CHAT_RULES_PATH))
