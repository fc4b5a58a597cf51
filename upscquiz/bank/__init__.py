from .schema import Question, QuestionMeta
from .normalizer import extract_correct, normalize, normalize_with_report
from .validator import validate
from .loader import BankLoader, fetch_json

__all__ = [
    "Question",
    "QuestionMeta",
    "extract_correct",
    "normalize",
    "normalize_with_report",
    "validate",
    "BankLoader",
    "fetch_json",
]
