"""Classify the user's reply at the confirmation step.

Bilingual substring matching; the vocabulary is part of the user-facing
contract. Swap the strategy here without touching the state machine.
"""

from __future__ import annotations

from enum import Enum


class ConfirmationReply(str, Enum):
    affirm = "affirm"
    edit = "edit"
    other = "other"


AFFIRM_WORDS: tuple[str, ...] = ("yes", "да", "confirm", "correct", "верно", "подтвердить")
EDIT_WORDS: tuple[str, ...] = ("edit", "change", "исправить", "изменить")


def classify_confirmation_reply(text: str) -> ConfirmationReply:
    """Affirm wins over edit when both appear."""
    normalized = (text or "").strip().lower()
    if not normalized:
        return ConfirmationReply.other
    if any(word in normalized for word in AFFIRM_WORDS):
        return ConfirmationReply.affirm
    if any(word in normalized for word in EDIT_WORDS):
        return ConfirmationReply.edit
    return ConfirmationReply.other
