"""
Heuristic checks run on submitted reviews: spam scoring, keyword sentiment
and near-duplicate detection.
"""
import re
from typing import Any, Dict, Iterable, List, Optional

SPAM_PHRASES = [
    "click here",
    "buy now",
    "limited offer",
    "act now",
    "free money",
    "earn cash",
    "work from home",
    "make money",
    "discount code",
    "promo code",
]

POSITIVE_WORDS = [
    "excellent", "amazing", "great", "wonderful", "fantastic", "love", "perfect",
    "best", "awesome", "good", "impressed", "satisfied", "recommend", "quality",
    "helpful", "effective", "works", "beautiful", "nice", "happy", "pleased",
    "glad", "superb", "outstanding", "brilliant",
]

NEGATIVE_WORDS = [
    "terrible", "awful", "bad", "horrible", "worst", "hate", "poor",
    "disappointing", "useless", "waste", "refund", "broken", "defective",
    "failed", "doesn't work", "not working", "problem", "issue", "unhappy",
    "dissatisfied", "regret", "avoid", "never", "garbage", "junk",
]

URL_RE = re.compile(r"(https?://|www\.|\.com|\.net|\.org)", re.IGNORECASE)
EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"(\d{3}[-.\s]?\d{3}[-.\s]?\d{4}|\d{10})")
NEGATION_RE = re.compile(r"\b(not|never|no|don't|doesn't|didn't|won't|can't|couldn't|shouldn't)\b", re.IGNORECASE)

DUPLICATE_SIMILARITY = 70


def detect_spam(text: Optional[str]) -> Dict[str, Any]:
    """
    Score review text from 0 to 100; higher is more suspicious.

    Returns:
        ``{"score": int, "flags": [str]}``
    """
    if not text or not text.strip():
        return {"score": 0, "flags": []}

    score = 0
    flags: List[str] = []

    letters = [c for c in text if c.isascii() and c.isalpha()]
    upper = [c for c in letters if c.isupper()]
    if len(letters) > 10 and len(upper) / len(letters) > 0.5:
        score += 25
        flags.append("excessive_caps")

    frequency: Dict[str, int] = {}
    for word in text.split():
        clean = re.sub(r"[^a-z0-9]", "", word.lower())
        if len(clean) > 3:
            frequency[clean] = frequency.get(clean, 0) + 1
    if max(frequency.values(), default=0) > 5:
        score += 20
        flags.append("repeated_words")

    if URL_RE.search(text):
        score += 30
        flags.append("contains_links")
    if EMAIL_RE.search(text):
        score += 25
        flags.append("contains_email")
    if PHONE_RE.search(text):
        score += 20
        flags.append("contains_phone")

    if len(text.strip()) < 10:
        score += 15
        flags.append("too_short")
    if text.count("!") > 5:
        score += 10
        flags.append("excessive_exclamation")

    lowered = text.lower()
    if any(phrase in lowered for phrase in SPAM_PHRASES):
        score += 15
        flags.append("spam_phrase")

    return {"score": min(score, 100), "flags": flags}


def _count_words(text: str, words: Iterable[str]) -> int:
    return sum(len(re.findall(rf"\b{re.escape(word)}\b", text)) for word in words)


def analyze_sentiment(text: Optional[str], rating: int) -> Dict[str, Any]:
    """Keyword sentiment blended with the star rating."""
    if not text or not text.strip():
        if rating >= 4:
            return {"sentiment": "positive", "confidence": 0.7}
        if rating <= 2:
            return {"sentiment": "negative", "confidence": 0.7}
        return {"sentiment": "neutral", "confidence": 0.5}

    lowered = text.lower()
    positive = _count_words(lowered, POSITIVE_WORDS)
    negative = _count_words(lowered, NEGATIVE_WORDS)

    score = (positive - negative) * 0.6 + (rating - 3) * 0.4
    if NEGATION_RE.search(lowered) and positive > negative:
        score -= 1

    if score > 0.5:
        sentiment = "positive"
    elif score < -0.5:
        sentiment = "negative"
    else:
        sentiment = "neutral"

    confidence = min((positive + negative) / 5, 1) * 0.8 + 0.2
    return {"sentiment": sentiment, "confidence": round(confidence, 2)}


def _significant_words(text: str) -> set:
    cleaned = re.sub(r"[^a-z0-9\s]", "", text.lower())
    return {word for word in cleaned.split() if len(word) > 3}


def text_similarity(first: Optional[str], second: Optional[str]) -> int:
    """Jaccard overlap of the words longer than three letters, as a percentage."""
    if not first or not second:
        return 0
    words_a = _significant_words(first)
    words_b = _significant_words(second)
    if not words_a or not words_b:
        return 0
    return round(len(words_a & words_b) / len(words_a | words_b) * 100)


def _review_text(review: Dict[str, Any]) -> str:
    return f"{review.get('title') or ''} {review.get('comment') or ''}".strip()


def check_duplicate(new_review: Dict[str, Any], existing: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Compare a new review against the same user's earlier reviews."""
    best_score = 0
    best_id = None
    new_text = _review_text(new_review)

    for review in existing:
        if review.get("user_id") != new_review.get("user_id"):
            continue
        score = text_similarity(new_text, _review_text(review))
        if score > best_score:
            best_score = score
            best_id = review.get("_id")

    return {
        "is_duplicate": best_score > DUPLICATE_SIMILARITY,
        "similarity_score": best_score,
        "duplicate_of": str(best_id) if best_id is not None else None,
    }
