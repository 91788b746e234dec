from leapboard.engine.errors import EngineError, NotFoundError, RegistryFetchError
from leapboard.engine.linking import ParticipantIndex, link, resolve
from leapboard.engine.ranking import rank
from leapboard.engine.targeting import TargetingResolver

__all__ = [
    "EngineError",
    "NotFoundError",
    "ParticipantIndex",
    "RegistryFetchError",
    "TargetingResolver",
    "link",
    "rank",
    "resolve",
]
