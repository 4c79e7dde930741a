from __future__ import annotations
import re

# Straight and curly quotes plus sentence punctuation
_PUNCTUATION = re.compile(r"[.,!?;:'\"“”‘’]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
	"""Canonical form of a free-text answer: trimmed, lowercased, no punctuation, single spaces."""
	text = _PUNCTUATION.sub("", text.strip().lower())
	return _WHITESPACE.sub(" ", text).strip()
