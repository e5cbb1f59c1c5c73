"""
Use cases of the relay service
"""
from cliprelay.use_cases.relay_video import RelayVideoUseCase

__all__ = [
    'RelayVideoUseCase',
]
