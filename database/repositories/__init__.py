from database.repositories.base import BaseRepository
from database.repositories.profile import ProfileRepository, profile_to_dict
from database.repositories.qcs import QCSRepository
from database.repositories.ai_failure import AiFailureRepository

__all__ = [
    'BaseRepository',
    'ProfileRepository',
    'profile_to_dict',
    'QCSRepository',
    'AiFailureRepository',
]
