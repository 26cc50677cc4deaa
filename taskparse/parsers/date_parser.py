"""
Date/Time Parser - relative and absolute temporal expressions.

Recognizes casual days ("tomorrow", "tonight"), weekdays ("next Monday"),
offsets ("in 3 days", "two weeks from now"), calendar dates ("March 5",
"2026-10-25", "10/25"), ordinal weekdays of a month ("third friday of
next month") and clock times ("5pm", "17:30", "noon"). A time attached to
a date ("tomorrow at 5pm") is reported as one ``time`` tag.

"Now" comes from an injected clock so results are reproducible. Vague
words ("soon", "later", a bare month name) are not matched at all.

Confidence follows component certainty:
    0.7 + 0.05 per certain component (year, month, day, hour, minute)
        + 0.1 if year, month and day are all explicit
        + 0.05 if the hour is explicit
        - 0.2 for matches shorter than 3 characters
        - 0.05 if the resolved moment is already in the past
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Callable, FrozenSet, List, Optional, Tuple

import regex
from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from taskparse.config.constants import (
    DATE_COLOR,
    DATE_ICON,
    ORDINAL_WEEKDAY_CONFIDENCE,
    TIME_ICON,
)
from taskparse.models.tag import ParsedTag
from taskparse.parsers.base import Parser
from taskparse.parsers.matching import has_match, iter_matches, spans_overlap

logger = logging.getLogger(__name__)

# =============================================================================
# Vocabulary
# =============================================================================
WEEKDAYS = {
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
    "mon": 0, "tue": 1, "tues": 1, "wed": 2, "thu": 3, "thur": 3,
    "thurs": 3, "fri": 4, "sat": 5, "sun": 6,
}
WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
RELATIVEDELTA_WEEKDAYS = [MO, TU, WE, TH, FR, SA, SU]

MONTHS = {
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11,
    "december": 12,
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "jun": 6, "jul": 7, "aug": 8,
    "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
}
MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12, "couple of": 2, "a couple of": 2,
}

ORDINALS = {"first": 1, "second": 2, "third": 3, "fourth": 4, "fifth": 5}

_WEEKDAY_FULL = r"(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday)"
_WEEKDAY_ABBR = r"(?:mon|tues|tue|wed|thurs|thur|thu|fri|sat|sun)"
_MONTH = (
    r"(?:january|february|march|april|may|june|july|august|september|october"
    r"|november|december|jan|feb|mar|apr|jun|jul|aug|sept|sep|oct|nov|dec)"
)
_NUMBER = r"(?:\d{1,3}|a couple of|couple of|an|a|one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve)"
_UNIT = r"(?:minute|min|hour|hr|day|week|month|year)s?"
_ORD_SUFFIX = r"(?:st|nd|rd|th)?"

COMPONENTS = ("year", "month", "day", "hour", "minute")

# Separator allowed between a date expression and an attached time
ATTACH_GAP = regex.compile(r"\s*(?:,\s*)?(?:at|on|@)?\s*", regex.IGNORECASE)


@dataclass
class _Temporal:
    """A resolved temporal match before it becomes a tag."""

    start: int
    end: int
    day: Optional[date] = None
    clock: Optional[time] = None
    moment: Optional[datetime] = None
    certain: FrozenSet[str] = field(default_factory=frozenset)
    fixed_confidence: Optional[float] = None
    # "at 9" with no am/pm; may shift to PM when attached to an evening date
    bare_hour: bool = False

    @property
    def length(self) -> int:
        return self.end - self.start


Resolver = Callable[["regex.Match", datetime], Optional[_Temporal]]


@dataclass
class _Rule:
    name: str
    pattern: "regex.Pattern"
    resolve: Resolver


def _number(token: str) -> Optional[int]:
    token = " ".join(token.lower().split())
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS.get(token)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _roll_forward(today: date, month: int, day: int) -> Optional[date]:
    """Month/day without a year: the next occurrence on or after *today*."""
    # Feb 29 can be up to eight years away
    for year in range(today.year, today.year + 9):
        candidate = _safe_date(year, month, day)
        if candidate is not None and candidate >= today:
            return candidate
    return None


def _expand_year(token: Optional[str]) -> Optional[int]:
    if not token:
        return None
    year = int(token)
    return year + 2000 if year < 100 else year


def _meridiem_hour(hour: int, meridiem: str) -> Optional[int]:
    if not 1 <= hour <= 12:
        return None
    meridiem = meridiem.lower().replace(".", "")
    if meridiem == "pm" and hour < 12:
        return hour + 12
    if meridiem == "am" and hour == 12:
        return 0
    return hour


def _evening_clock(t: _Temporal, d: _Temporal) -> Optional[time]:
    """Clock of time *t* attached to date *d*; a bare hour follows an evening date."""
    if t.bare_hour and d.clock is not None and d.clock.hour >= 12 and t.clock.hour < 12:
        return t.clock.replace(hour=t.clock.hour + 12)
    return t.clock


# =============================================================================
# Date resolvers
# =============================================================================

def _resolve_casual(match, now: datetime) -> Optional[_Temporal]:
    word = " ".join(match.group(1).lower().split())
    today = now.date()
    certain = frozenset({"day"})

    if word == "today":
        return _Temporal(match.start(), match.end(), day=today, certain=certain)
    if word == "tonight":
        return _Temporal(match.start(), match.end(), day=today, clock=time(20, 0), certain=certain)
    if word in ("tomorrow", "tmrw", "tmr"):
        return _Temporal(match.start(), match.end(), day=today + timedelta(days=1), certain=certain)
    if word == "day after tomorrow":
        return _Temporal(match.start(), match.end(), day=today + timedelta(days=2), certain=certain)
    if word == "yesterday":
        return _Temporal(match.start(), match.end(), day=today - timedelta(days=1), certain=certain)
    if word in ("eod", "end of day", "end of the day"):
        return _Temporal(match.start(), match.end(), day=today, clock=time(17, 0), certain=certain)
    return None


def _resolve_weekday(match, now: datetime) -> Optional[_Temporal]:
    modifier = (match.group("mod") or "").lower()
    target = WEEKDAYS[match.group("wd").lower()]
    today = now.date()
    current = today.weekday()

    if modifier == "this":
        days = (target - current) % 7
    elif modifier == "next":
        # Occurrence in the following calendar week
        days = 7 - current + target
    elif modifier == "last":
        days = -((current - target) % 7 or 7)
    else:
        days = (target - current) % 7 or 7

    return _Temporal(
        match.start(), match.end(),
        day=today + timedelta(days=days),
        certain=frozenset({"day"}),
    )


def _resolve_period(match, now: datetime) -> Optional[_Temporal]:
    modifier = match.group(1).lower()
    unit = match.group(2).lower()
    today = now.date()

    if unit == "weekend":
        saturday = today + relativedelta(weekday=SA(+1))
        if modifier == "next":
            saturday += timedelta(days=7)
        return _Temporal(match.start(), match.end(), day=saturday, certain=frozenset({"day"}))

    if modifier != "next":
        return None
    if unit == "week":
        target = today + timedelta(days=7)
    elif unit == "month":
        target = today + relativedelta(months=1)
    else:
        target = today + relativedelta(years=1)
    return _Temporal(match.start(), match.end(), day=target)


def _resolve_offset(match, now: datetime) -> Optional[_Temporal]:
    amount = _number(match.group("num"))
    if amount is None or amount <= 0:
        return None
    unit = match.group("unit").lower().rstrip("s")

    if unit in ("minute", "min", "hour", "hr"):
        delta = timedelta(minutes=amount) if unit in ("minute", "min") else timedelta(hours=amount)
        moment = (now + delta).replace(second=0, microsecond=0)
        return _Temporal(
            match.start(), match.end(),
            moment=moment,
            certain=frozenset({"hour", "minute"}),
        )

    today = now.date()
    if unit == "day":
        target = today + timedelta(days=amount)
    elif unit == "week":
        target = today + timedelta(weeks=amount)
    elif unit == "month":
        target = today + relativedelta(months=amount)
    else:
        target = today + relativedelta(years=amount)
    return _Temporal(match.start(), match.end(), day=target, certain=frozenset({"day"}))


def _resolve_iso(match, now: datetime) -> Optional[_Temporal]:
    day = _safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    if day is None:
        return None
    return _Temporal(match.start(), match.end(), day=day, certain=frozenset({"year", "month", "day"}))


def _resolve_numeric(match, now: datetime) -> Optional[_Temporal]:
    month, day_num = int(match.group(1)), int(match.group(2))
    year = _expand_year(match.group(3))
    if year is not None:
        day = _safe_date(year, month, day_num)
        certain = frozenset({"year", "month", "day"})
    else:
        day = _roll_forward(now.date(), month, day_num)
        certain = frozenset({"month", "day"})
    if day is None:
        return None
    return _Temporal(match.start(), match.end(), day=day, certain=certain)


def _resolve_month_name(match, now: datetime) -> Optional[_Temporal]:
    month = MONTHS[match.group("month").lower()]
    day_num = int(match.group("day"))
    year = _expand_year(match.group("year"))
    if year is not None:
        day = _safe_date(year, month, day_num)
        certain = frozenset({"year", "month", "day"})
    else:
        day = _roll_forward(now.date(), month, day_num)
        certain = frozenset({"month", "day"})
    if day is None:
        return None
    return _Temporal(match.start(), match.end(), day=day, certain=certain)


def _resolve_ordinal_weekday(match, now: datetime) -> Optional[_Temporal]:
    ordinal = match.group("ord").lower()
    weekday = RELATIVEDELTA_WEEKDAYS[WEEKDAYS[match.group("wd").lower()]]
    month_phrase = " ".join(match.group("month").lower().split())
    today = now.date()

    if month_phrase == "this month":
        year, month = today.year, today.month
    elif month_phrase == "next month":
        first_of_next = today.replace(day=1) + relativedelta(months=1)
        year, month = first_of_next.year, first_of_next.month
    else:
        month = MONTHS[month_phrase]
        year = today.year + 1 if month < today.month else today.year

    first = date(year, month, 1)
    last = first + relativedelta(day=31, weekday=weekday(-1))
    if ordinal == "last":
        day = last
    else:
        day = first + relativedelta(weekday=weekday(+ORDINALS[ordinal]))
        if day.month != month:
            day = last

    return _Temporal(
        match.start(), match.end(),
        day=day,
        certain=frozenset({"month", "day"}),
        fixed_confidence=ORDINAL_WEEKDAY_CONFIDENCE,
    )


# =============================================================================
# Time resolvers
# =============================================================================

def _resolve_meridiem_time(match, now: datetime) -> Optional[_Temporal]:
    hour = _meridiem_hour(int(match.group("hour")), match.group("mer"))
    if hour is None:
        return None
    minute_token = match.group("minute")
    minute = int(minute_token) if minute_token else 0
    certain = {"hour", "minute"} if minute_token else {"hour"}
    return _Temporal(match.start(), match.end(), clock=time(hour, minute), certain=frozenset(certain))


def _resolve_24h_time(match, now: datetime) -> Optional[_Temporal]:
    hour, minute = int(match.group("hour")), int(match.group("minute"))
    if hour > 23 or minute > 59:
        return None
    return _Temporal(
        match.start(), match.end(),
        clock=time(hour, minute),
        certain=frozenset({"hour", "minute"}),
    )


def _resolve_bare_hour(match, now: datetime) -> Optional[_Temporal]:
    hour = int(match.group("hour"))
    if not 1 <= hour <= 12:
        return None
    # "at 5" reads as afternoon for working hours
    if hour <= 7:
        hour += 12
    return _Temporal(
        match.start(), match.end(),
        clock=time(hour % 24, 0),
        certain=frozenset({"hour"}),
        bare_hour=True,
    )


def _resolve_named_time(match, now: datetime) -> Optional[_Temporal]:
    word = match.group("name").lower()
    clock = time(0, 0) if word == "midnight" else time(12, 0)
    return _Temporal(match.start(), match.end(), clock=clock, certain=frozenset({"hour", "minute"}))


_FLAGS = regex.IGNORECASE

DATE_RULES: List[_Rule] = [
    _Rule(
        "ordinal_weekday",
        regex.compile(
            rf"\b(?:on\s+)?(?:the\s+)?(?P<ord>first|second|third|fourth|fifth|last)\s+"
            rf"(?P<wd>{_WEEKDAY_FULL})\s+(?:of|in)\s+"
            rf"(?P<month>next\s+month|this\s+month|january|february|march|april|may|june"
            rf"|july|august|september|october|november|december)\b",
            _FLAGS,
        ),
        _resolve_ordinal_weekday,
    ),
    _Rule("iso", regex.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b"), _resolve_iso),
    _Rule(
        "numeric",
        regex.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})(?:/(\d{4}|\d{2}))?(?![\d/])"),
        _resolve_numeric,
    ),
    _Rule(
        "month_day",
        regex.compile(
            rf"\b(?P<month>{_MONTH})\.?\s+(?P<day>\d{{1,2}}){_ORD_SUFFIX}\b"
            rf"(?:,?\s+(?P<year>\d{{4}})\b)?",
            _FLAGS,
        ),
        _resolve_month_name,
    ),
    _Rule(
        "day_month",
        regex.compile(
            rf"\b(?P<day>\d{{1,2}}){_ORD_SUFFIX}\s+(?:of\s+)?(?P<month>{_MONTH})\b"
            rf"(?:,?\s+(?P<year>\d{{4}})\b)?",
            _FLAGS,
        ),
        _resolve_month_name,
    ),
    _Rule(
        "casual",
        regex.compile(
            r"\b(day\s+after\s+tomorrow|today|tonight|tomorrow|tmrw|tmr|yesterday"
            r"|end\s+of\s+(?:the\s+)?day|eod)\b",
            _FLAGS,
        ),
        _resolve_casual,
    ),
    _Rule(
        "weekday",
        regex.compile(rf"\b(?:(?P<mod>next|this|last|on)\s+)?(?P<wd>{_WEEKDAY_FULL})\b", _FLAGS),
        _resolve_weekday,
    ),
    _Rule(
        "weekday_abbr",
        regex.compile(rf"\b(?P<mod>next|this|last|on)\s+(?P<wd>{_WEEKDAY_ABBR})\b", _FLAGS),
        _resolve_weekday,
    ),
    _Rule(
        "period",
        regex.compile(r"\b(next|this)\s+(week|month|year|weekend)\b", _FLAGS),
        _resolve_period,
    ),
    _Rule(
        "offset",
        regex.compile(rf"\bin\s+(?P<num>{_NUMBER})\s+(?P<unit>{_UNIT})\b", _FLAGS),
        _resolve_offset,
    ),
    _Rule(
        "offset_from_now",
        regex.compile(rf"\b(?P<num>{_NUMBER})\s+(?P<unit>{_UNIT})\s+from\s+now\b", _FLAGS),
        _resolve_offset,
    ),
]

TIME_RULES: List[_Rule] = [
    _Rule(
        "meridiem",
        regex.compile(
            r"\b(?:at\s+|@\s*)?(?P<hour>\d{1,2})(?::(?P<minute>[0-5]\d))?\s*"
            r"(?P<mer>a\.m\.|p\.m\.|am|pm)(?!\p{L})",
            _FLAGS,
        ),
        _resolve_meridiem_time,
    ),
    _Rule(
        "24h",
        regex.compile(r"\b(?:at\s+|@\s*)?(?P<hour>\d{1,2}):(?P<minute>\d{2})\b", _FLAGS),
        _resolve_24h_time,
    ),
    _Rule(
        "bare_hour",
        regex.compile(r"\bat\s+(?P<hour>\d{1,2})\b(?![:/.,]?\d)(?!\s*(?:%|st\b|nd\b|rd\b|th\b))", _FLAGS),
        _resolve_bare_hour,
    ),
    _Rule(
        "named",
        regex.compile(r"\b(?:at\s+)?(?P<name>noon|midday|midnight)\b", _FLAGS),
        _resolve_named_time,
    ),
]


def _accept_longest(candidates: List[Tuple[int, _Temporal]], taken: List[_Temporal]) -> List[_Temporal]:
    """Greedy longest-first selection of non-overlapping matches."""
    accepted: List[_Temporal] = []
    for _, cand in sorted(candidates, key=lambda c: (-c[1].length, c[1].start, c[0])):
        span = (cand.start, cand.end)
        if any(spans_overlap(span, (t.start, t.end)) for t in taken + accepted):
            continue
        accepted.append(cand)
    return accepted


class DateTimeParser(Parser):
    """
    Temporal expression parser anchored to an injectable clock.

    Args:
        clock: Zero-argument callable returning the reference "now".
    """

    id = "date-time-parser"
    name = "Date/Time Parser"
    priority = 10

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock if clock is not None else datetime.now

    def test(self, text: str) -> bool:
        return any(has_match(rule.pattern, text) for rule in DATE_RULES + TIME_RULES)

    def parse(self, text: str) -> List[ParsedTag]:
        now = self._clock()

        dates = _accept_longest(self._scan(DATE_RULES, text, now), [])
        times = _accept_longest(self._scan(TIME_RULES, text, now), dates)

        tags: List[ParsedTag] = []
        for temporal in self._attach_times(text, dates, times):
            tags.append(self._to_tag(text, temporal, now))

        tags.sort(key=lambda t: t.start_index)
        return tags

    def _scan(self, rules: List[_Rule], text: str, now: datetime) -> List[Tuple[int, _Temporal]]:
        found: List[Tuple[int, _Temporal]] = []
        for index, rule in enumerate(rules):
            for match in iter_matches(rule.pattern, text):
                resolved = rule.resolve(match, now)
                if resolved is None:
                    logger.debug("Rule %s matched %r but did not resolve", rule.name, match.group(0))
                    continue
                found.append((index, resolved))
        return found

    def _attach_times(
        self, text: str, dates: List[_Temporal], times: List[_Temporal]
    ) -> List[_Temporal]:
        """Merge each time with an adjacent date into a single expression."""
        merged: List[_Temporal] = []
        used_times = set()

        for d in sorted(dates, key=lambda t: t.start):
            partner = None
            for i, t in enumerate(times):
                if i in used_times or d.day is None:
                    continue
                gap = text[d.end:t.start] if d.end <= t.start else text[t.end:d.start]
                if ATTACH_GAP.fullmatch(gap):
                    partner = i
                    break

            if partner is None:
                merged.append(d)
                continue

            t = times[partner]
            used_times.add(partner)
            merged.append(
                _Temporal(
                    start=min(d.start, t.start),
                    end=max(d.end, t.end),
                    day=d.day,
                    clock=_evening_clock(t, d),
                    certain=d.certain | t.certain,
                )
            )

        for i, t in enumerate(times):
            if i not in used_times:
                merged.append(t)

        return merged

    def _to_tag(self, text: str, temporal: _Temporal, now: datetime) -> ParsedTag:
        if temporal.moment is not None:
            value = temporal.moment
        elif temporal.day is not None and temporal.clock is not None:
            value = datetime.combine(temporal.day, temporal.clock, tzinfo=now.tzinfo)
        elif temporal.clock is not None:
            value = datetime.combine(now.date(), temporal.clock, tzinfo=now.tzinfo)
            if value < now:
                value += timedelta(days=1)
        else:
            value = temporal.day

        has_time = isinstance(value, datetime)
        confidence = (
            temporal.fixed_confidence
            if temporal.fixed_confidence is not None
            else self.calculate_confidence(temporal, value, now)
        )

        return self.make_tag(
            "time" if has_time else "date",
            value,
            format_display_text(value, now),
            temporal.start,
            temporal.end,
            text,
            confidence,
            icon_name=TIME_ICON if has_time else DATE_ICON,
            color=DATE_COLOR,
        )

    def calculate_confidence(self, temporal: _Temporal, value, now: datetime) -> float:
        certain = temporal.certain
        confidence = 0.7 + 0.05 * sum(1 for c in COMPONENTS if c in certain)

        if {"year", "month", "day"} <= certain:
            confidence += 0.1
        if "hour" in certain:
            confidence += 0.05
        if temporal.length < 3:
            confidence -= 0.2

        if isinstance(value, datetime):
            in_past = value < now
        else:
            in_past = value < now.date()
        if in_past:
            confidence -= 0.05

        return max(0.1, min(1.0, confidence))


def format_time(value: datetime) -> str:
    hour12 = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour12}:{value.minute:02d} {suffix}"


def format_display_text(value, now: datetime) -> str:
    """Human-facing rendering relative to *now* ("Tomorrow at 5:00 PM", "Mar 5")."""
    has_time = isinstance(value, datetime)
    day = value.date() if has_time else value
    today = now.date()
    suffix = f" at {format_time(value)}" if has_time else ""

    if day == today:
        return f"Today{suffix}"
    if day == today + timedelta(days=1):
        return f"Tomorrow{suffix}"

    days_diff = (day - today).days
    if 0 <= days_diff <= 7:
        return f"{WEEKDAY_NAMES[day.weekday()]}{suffix}"

    label = f"{MONTH_ABBR[day.month - 1]} {day.day}"
    if day.year != today.year:
        label += f", {day.year}"
    return f"{label}{suffix}"
