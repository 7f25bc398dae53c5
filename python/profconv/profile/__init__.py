from .loader import load_profile, load_profile_from_stream
from .model import Category, Extensions, Meta, Profile, Thread

__all__ = [
    "Category",
    "Extensions",
    "Meta",
    "Profile",
    "Thread",
    "load_profile",
    "load_profile_from_stream",
]
