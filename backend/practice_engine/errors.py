"""Exceptions raised by the practice engine.

Routers never catch these; ``main`` maps them to HTTP responses.
"""
from __future__ import annotations


class PracticeError(Exception):
	status_code = 500

	def __init__(self, detail: str) -> None:
		super().__init__(detail)
		self.detail = detail


class NotFound(PracticeError):
	"""A set, section, item or submission id did not resolve."""

	status_code = 404


class InvalidInput(PracticeError):
	"""The request is missing required data or names an unknown skill/type."""

	status_code = 400
