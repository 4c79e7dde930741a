from __future__ import annotations
from typing import Dict, Iterable, List, Tuple

from .schemas import Analytics, GradedAnswer


def answered_total(graded: List[GradedAnswer]) -> int:
	# Answers that never resolved to an item are not part of the attempt
	return max(1, sum(1 for a in graded if not a.anomaly))


def aggregate(graded: List[GradedAnswer], skill: str, auto_graded_skills: Iterable[str]) -> Analytics:
	"""Accuracy, mean time per item and per-type correctness for one graded attempt."""
	counted = [a for a in graded if not a.anomaly]
	total = answered_total(graded)
	avg_time = sum(a.time_spent_ms or 0 for a in counted) / total

	machine_graded = [a for a in counted if a.correct is not None]
	accuracy = None
	if skill in set(auto_graded_skills):
		correct = sum(1 for a in machine_graded if a.correct)
		accuracy = round(correct / max(1, len(machine_graded)), 2)

	tally: Dict[str, Tuple[int, int]] = {}
	for a in machine_graded:
		right, seen = tally.get(a.type, (0, 0))
		tally[a.type] = (right + (1 if a.correct else 0), seen + 1)
	by_type = {t: round(right / seen, 2) for t, (right, seen) in tally.items()}

	return Analytics(accuracy=accuracy, avg_time_per_item_ms=avg_time, by_type=by_type)
