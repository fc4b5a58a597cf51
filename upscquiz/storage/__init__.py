from .schema import APP_KEYS, HISTORY_CAP, MISTAKES_CAP, MistakeEntry, ResultRecord
from .store import Store

__all__ = [
    "APP_KEYS",
    "HISTORY_CAP",
    "MISTAKES_CAP",
    "MistakeEntry",
    "ResultRecord",
    "Store",
]
