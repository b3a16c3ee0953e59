import datetime
from collections import Counter
from typing import Dict, Iterable, List, Optional

from videodiary.journals.models import JournalEntry
from videodiary.journals.schemas import InsightsOut, Mood

STREAK_WINDOW_DAYS = 30


def compute_streak(dates: Iterable[str], today: Optional[datetime.date] = None) -> int:
    """
    Consecutive days with at least one entry, counting back from today.
    A missing entry for today does not break the streak; only the last
    STREAK_WINDOW_DAYS days are considered.
    """
    today = today or datetime.date.today()
    recorded = set(dates)
    streak = 0
    for offset in range(STREAK_WINDOW_DAYS):
        day = (today - datetime.timedelta(days=offset)).isoformat()
        if day in recorded:
            streak += 1
        elif offset > 0:
            break
    return streak


def mood_stats(entries: Iterable[JournalEntry]) -> Dict[str, int]:
    counts = Counter(entry.mood for entry in entries)
    return {mood.value: counts.get(mood.value, 0) for mood in Mood}


def recent_topics(entries: Iterable[JournalEntry], limit: int = 5) -> List[str]:
    counts: Counter = Counter()
    for entry in entries:
        for topic in (entry.ai_analysis or {}).get("key_topics", []):
            counts[topic.strip().lower()] += 1
    return [topic for topic, _ in counts.most_common(limit)]


def build_insights(entries: List[JournalEntry], today: Optional[datetime.date] = None) -> InsightsOut:
    today = today or datetime.date.today()
    dates = [entry.date for entry in entries]
    return InsightsOut(
        total_entries=len(entries),
        streak=compute_streak(dates, today),
        has_entry_today=today.isoformat() in dates,
        mood_stats=mood_stats(entries),
        recent_topics=recent_topics(entries),
    )
