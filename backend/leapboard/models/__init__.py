from leapboard.models.registry import School, State, Student
from leapboard.models.content import ContentKind, ExpiryType, TargetType, TargetedContent
from leapboard.models.activity import PracticeRecord, QuizAttempt

__all__ = [
    "ContentKind",
    "ExpiryType",
    "PracticeRecord",
    "QuizAttempt",
    "School",
    "State",
    "Student",
    "TargetType",
    "TargetedContent",
]
