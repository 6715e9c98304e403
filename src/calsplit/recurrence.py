from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .errors import MalformedRecurrenceLine
from .timestamps import parse_timestamp

RRULE = "RRULE"
EXRULE = "EXRULE"

RULE_KEYWORDS = {RRULE, EXRULE}


@dataclass
class RecurrenceRule:
    """RRULE/EXRULE parameters in their original order."""

    params: List[Tuple[str, str]] = field(default_factory=list)

    @classmethod
    def parse(cls, payload: str, raw: Optional[str] = None) -> "RecurrenceRule":
        raw = payload if raw is None else raw
        if not payload:
            raise MalformedRecurrenceLine(raw, "empty rule")

        params: List[Tuple[str, str]] = []
        for part in payload.split(";"):
            key, sep, value = part.partition("=")
            key = key.strip().upper()
            if not sep or not key:
                raise MalformedRecurrenceLine(raw, f"expected KEY=VALUE, got {part!r}")
            params.append((key, value.strip()))
        return cls(params)

    def remove(self, key: str) -> None:
        key = key.upper()
        self.params = [(k, v) for k, v in self.params if k != key]

    def set(self, key: str, value: str) -> None:
        # Replace in place so canonical key order survives; append otherwise.
        key = key.upper()
        replaced = False
        updated: List[Tuple[str, str]] = []
        for k, v in self.params:
            if k == key:
                if replaced:
                    continue
                updated.append((k, value))
                replaced = True
            else:
                updated.append((k, v))
        if not replaced:
            updated.append((key, value))
        self.params = updated

    def to_payload(self) -> str:
        return ";".join(f"{k}={v}" for k, v in self.params)


@dataclass(frozen=True)
class RecurrenceLine:
    keyword: str     # upper-cased; "" when the line has no recognizable keyword
    payload: str
    raw: str

    @classmethod
    def parse(cls, raw: str) -> "RecurrenceLine":
        head, sep, payload = raw.partition(":")
        # Property parameters (e.g. EXDATE;TZID=...) follow the name.
        name = head.split(";", 1)[0].strip().upper()
        if not sep:
            if name in RULE_KEYWORDS:
                raise MalformedRecurrenceLine(raw, "missing ':' after keyword")
            return cls(keyword="", payload=raw, raw=raw)
        return cls(keyword=name, payload=payload, raw=raw)

    def rule(self) -> RecurrenceRule:
        return RecurrenceRule.parse(self.payload, raw=self.raw)


RecurrenceSet = List[RecurrenceLine]


def parse_recurrence(lines: Iterable[str]) -> RecurrenceSet:
    return [RecurrenceLine.parse(line) for line in lines]


def has_rrule(lines: Iterable[str]) -> bool:
    return any(line.keyword == RRULE for line in parse_recurrence(lines))


def recurrence_until(cutoff_token: str) -> str:
    """Return the UNTIL value that ends a series before ``cutoff_token``."""
    return parse_timestamp(cutoff_token).to_until_text()


def truncate_recurrence(lines: List[str], cutoff_token: str) -> List[str]:
    """Bound every RRULE in ``lines`` at ``cutoff_token``.

    COUNT is dropped (it cannot coexist with UNTIL) and UNTIL is set or
    replaced. All other lines are returned unchanged. Raises
    MalformedTimestamp or MalformedRecurrenceLine without partial output.
    """
    until = recurrence_until(cutoff_token)

    updated: List[str] = []
    for line in parse_recurrence(lines):
        if line.keyword == RRULE:
            rule = line.rule()
            rule.remove("COUNT")
            rule.set("UNTIL", until)
            updated.append(f"{RRULE}:{rule.to_payload()}")
            continue
        if line.keyword == EXRULE:
            line.rule()
        updated.append(line.raw)
    return updated
