"""
Rule-based classifier: assigns exactly one Category to a message.

Order of evaluation:
1. OTP short-circuit (strong phrase and no digest/newsletter exclusion).
2. Weighted keyword scoring over subject, body and sender.
3. Sender-domain heuristics and subject/body overrides.
4. Highest score wins, ties broken by CATEGORY_PRIORITY.
5. No positive signal: Attachments when the message has any, else Other.
"""

import logging
import re
from typing import Dict

from .models import Category, Message
from .patterns import (
    BODY_HINTS,
    CATEGORY_KEYWORDS,
    CATEGORY_PRIORITY,
    DEFAULT_OTP_POLICY,
    KEYWORD_WEIGHTS,
    NOREPLY_PROMO_BODY,
    NOREPLY_PROMO_POINTS,
    NOREPLY_PROMO_SENDERS,
    SENDER_HINTS,
    SUBJECT_OVERRIDES,
    OtpPolicy,
    contains_any,
    contains_keyword,
)

logger = logging.getLogger(__name__)

_SIX_DIGITS = re.compile(r"\b\d{6}\b")


def _lower(value) -> str:
    return value.lower() if isinstance(value, str) else ""


class Classifier:
    def __init__(
        self,
        body_chars: int = 500,
        otp_policy: OtpPolicy = DEFAULT_OTP_POLICY,
    ) -> None:
        self.body_chars = body_chars
        self.otp_policy = otp_policy

    def classify(self, message: Message) -> Category:
        subject = _lower(getattr(message, "subject", ""))
        body = _lower(getattr(message, "body_text", ""))[: self.body_chars]
        sender = _lower(getattr(message, "sender", ""))
        attachments = getattr(message, "attachments", None) or []

        if self.is_otp(f"{subject} {body}", sender):
            return Category.OTP

        scores = self.score_categories(subject, body, sender)

        best = Category.OTHER
        best_score = 0
        for category in CATEGORY_PRIORITY:
            if scores[category] > best_score:
                best = category
                best_score = scores[category]

        if best_score <= 0:
            return Category.ATTACHMENTS if attachments else Category.OTHER

        logger.debug("Classified as %s with score %d", best.value, best_score)
        return best

    def score_categories(self, subject: str, body: str, sender: str) -> Dict[Category, int]:
        scores: Dict[Category, int] = {category: 0 for category in CATEGORY_PRIORITY}

        for category, keywords in CATEGORY_KEYWORDS.items():
            for keyword in keywords:
                if contains_keyword(subject, keyword):
                    scores[category] += KEYWORD_WEIGHTS["subject"]
                if contains_keyword(body, keyword):
                    scores[category] += KEYWORD_WEIGHTS["body"]
                if contains_keyword(sender, keyword):
                    scores[category] += KEYWORD_WEIGHTS["sender"]

        # Sender addresses are matched as plain substrings ("recruiting@", "careers-noreply").
        for hints, category, points in SENDER_HINTS:
            if any(hint in sender for hint in hints):
                scores[category] += points

        if any(marker in sender for marker in NOREPLY_PROMO_SENDERS) and any(
            word in body for word in NOREPLY_PROMO_BODY
        ):
            scores[Category.PROMOTIONS] += NOREPLY_PROMO_POINTS

        for pattern, category, points in SUBJECT_OVERRIDES:
            if pattern.search(subject):
                scores[category] += points

        for pattern, category, points in BODY_HINTS:
            if pattern.search(body):
                scores[category] += points

        return scores

    def is_otp(self, text: str, sender: str = "") -> bool:
        policy = self.otp_policy
        if contains_any(text, policy.exclusion_keywords):
            return False

        if contains_any(text, policy.strong_phrases):
            return True

        if contains_any(text, policy.code_prompts):
            return True

        if (
            any(marker in sender for marker in policy.noreply_markers)
            and ("code" in text or "verify" in text)
            and _SIX_DIGITS.search(text)
        ):
            return True

        return False
