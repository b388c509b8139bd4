from fit360.models.user import User, AuthSession
from fit360.models.metric import Metric
from fit360.models.oura import OuraPersonalInfo, OuraWorkout, OuraSession, OuraTag
from fit360.models.journal import MacroLog, Photo, Profile

__all__ = [
    "User",
    "AuthSession",
    "Metric",
    "OuraPersonalInfo",
    "OuraWorkout",
    "OuraSession",
    "OuraTag",
    "MacroLog",
    "Photo",
    "Profile",
]
