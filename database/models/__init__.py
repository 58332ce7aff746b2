from .base import Base
from .profile import Profile, PartnerPreference, Block
from .qcs import QCSRecord
from .ai_failure import AiRequestFailure

__all__ = [
    'Base',
    'Profile',
    'PartnerPreference',
    'Block',
    'QCSRecord',
    'AiRequestFailure',
]
