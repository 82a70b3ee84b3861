"""Ordered (predicate, result) rules.

Priority decisions such as deinterlace filter selection or color
fallback are written as a tuple of Rule objects evaluated top-down; the
first rule whose predicate holds supplies the result.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from mediaproc.domain.models import MediaProperties, MediaStream
from mediaproc.jobs.models import OutputStreamDefinition, VideoEncodeJob

T = TypeVar("T")


@dataclass(frozen=True)
class EncodeContext:
    """Everything a derivation rule may look at."""

    media: MediaProperties
    stream: MediaStream
    job: VideoEncodeJob
    output: OutputStreamDefinition


@dataclass(frozen=True)
class Rule(Generic[T]):
    """A named predicate and the value it selects."""

    name: str
    predicate: Callable[[EncodeContext], bool]
    result: Callable[[EncodeContext], T]


def first_match(rules: Iterable[Rule[T]], ctx: EncodeContext) -> Rule[T] | None:
    """Return the first rule whose predicate holds for ctx, or None."""
    for rule in rules:
        if rule.predicate(ctx):
            return rule
    return None
