"""Media Director - decision core for conversational media generation.

Classifies user turns, selects generation models, augments prompts, and
expands multi-step requests into workflows.
"""

from media_director.core import (
    Attachment,
    DecisionCore,
    ExecutionResult,
    NoSuitableModel,
    SuggestionOutcome,
    TurnResult,
)

__version__ = "0.1.0"

__all__ = [
    "Attachment",
    "DecisionCore",
    "ExecutionResult",
    "NoSuitableModel",
    "SuggestionOutcome",
    "TurnResult",
]
