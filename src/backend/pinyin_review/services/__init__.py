"""
Services package
"""

from .base import Scheduler
from .mistake_service import DueMistake, MistakeScheduler
from .symbol_service import DueSymbol, SymbolMasterySchedule
from .ai_augmenter import AIAugmenter, AugmentResult, MistakeContext, ValidatedItem, parse_candidates
from .review_session import ItemKind, ReviewQueue, ReviewQueueItem, ReviewSessionBuilder, SubmitResult
from .level_service import LevelProgressService

__all__ = [
    "Scheduler",
    "DueMistake",
    "MistakeScheduler",
    "DueSymbol",
    "SymbolMasterySchedule",
    "AIAugmenter",
    "AugmentResult",
    "MistakeContext",
    "ValidatedItem",
    "parse_candidates",
    "ItemKind",
    "ReviewQueue",
    "ReviewQueueItem",
    "ReviewSessionBuilder",
    "SubmitResult",
    "LevelProgressService",
]
