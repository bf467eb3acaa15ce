"""
Rule engine: orchestrates Extractor -> Classifier -> Scorer per message.

Core pieces:
- RuleEngine.process: one message to one ProcessedMessage
- RuleEngine.process_batch: every message resolves to a result or a default
- build_rule_engine: wiring from Config
"""

from datetime import datetime
import logging
from typing import Iterable, List, Optional

from .classifier import Classifier
from .config import Config
from .extractor import Extractor
from .message_source import html_to_text
from .models import Category, ExtractedData, Message, ProcessedMessage
from .scorer import Scorer

logger = logging.getLogger(__name__)


def message_text(message: Message) -> str:
    """Subject, body (HTML-stripped fallback) and snippet as one string."""
    body = message.body_text or html_to_text(message.body_html)
    parts = [message.subject, body, message.snippet]
    return " ".join(p for p in parts if isinstance(p, str) and p)


class RuleEngine:
    def __init__(
        self,
        classifier: Optional[Classifier] = None,
        extractor: Optional[Extractor] = None,
        scorer: Optional[Scorer] = None,
        fallback_score: int = 3,
    ) -> None:
        self.classifier = classifier or Classifier()
        self.extractor = extractor or Extractor()
        self.scorer = scorer or Scorer()
        self.fallback_score = fallback_score

    def process(self, message: Message, now: Optional[datetime] = None) -> ProcessedMessage:
        extracted = self.extractor.extract_all(message_text(message))
        category = self.classifier.classify(message)

        fields = dict(message)
        fields.update(category=category, extracted=extracted, importance_score=0)
        unscored = ProcessedMessage(**fields)
        score = self.scorer.calculate_score(unscored, now=now)
        return unscored.model_copy(update={"importance_score": score})

    def process_batch(
        self,
        messages: Iterable[Message],
        now: Optional[datetime] = None,
    ) -> List[ProcessedMessage]:
        """
        Process every message; a failure on one yields its default record.

        The output always has one entry per input, in input order.
        """
        results: List[ProcessedMessage] = []
        failures = 0

        for message in messages:
            try:
                results.append(self.process(message, now=now))
            except Exception as e:
                failures += 1
                # Exception text can echo message content; log its type only.
                logger.warning(
                    "Failed to process message id=%s; using defaults: %s",
                    getattr(message, "id", "(unknown)"),
                    type(e).__name__,
                )
                results.append(self._default_for(message))

        logger.info(
            "Processed %d messages (%d defaulted).",
            len(results),
            failures,
        )
        return results

    def _default_for(self, message: Message) -> ProcessedMessage:
        # model_construct skips validation so a malformed message cannot fail twice.
        fields = dict(message) if isinstance(message, (Message, dict)) else {}
        fields.setdefault("id", getattr(message, "id", ""))
        fields.update(
            category=Category.OTHER,
            extracted=ExtractedData(),
            importance_score=self.fallback_score,
        )
        return ProcessedMessage.model_construct(**fields)


def build_rule_engine(config: Config) -> RuleEngine:
    return RuleEngine(
        classifier=Classifier(body_chars=config.classifier_body_chars),
        extractor=Extractor(
            otp_min_length=config.otp_min_length,
            otp_max_length=config.otp_max_length,
        ),
        scorer=Scorer(),
        fallback_score=config.fallback_score,
    )
