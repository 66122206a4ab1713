from .schemas import GamePage, RecordFailure, RecordOutcome
from .service import list_categories, list_games, record_deployment

__all__ = [
    "GamePage",
    "RecordFailure",
    "RecordOutcome",
    "list_categories",
    "list_games",
    "record_deployment",
]
