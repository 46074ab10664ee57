from dataclasses import dataclass
from typing import Callable, Dict, List, Optional


@dataclass(frozen=True)
class ActivityMetadata:
    """Metadata for activity discovery."""
    activity_func: Callable
    name: str
    category: str

    @property
    def key(self) -> str:
        return f"{self.category}:{self.name}"


class ActivityRegistry:
    """Central registry for all activities.

    Activity names are the Temporal activity type names the workflows call, so a
    name may only be registered once across categories.
    """

    _activities: Dict[str, ActivityMetadata] = {}

    @classmethod
    def register(cls, category: str, name: Optional[str] = None):
        """Decorator to register an activity under a category."""
        def decorator(activity_func):
            metadata = ActivityMetadata(
                activity_func=activity_func,
                name=name or activity_func.__name__,
                category=category,
            )
            existing = cls._activities.get(metadata.name)
            if existing is not None and existing.activity_func is not activity_func:
                raise ValueError(
                    f"Activity '{metadata.name}' already registered as '{existing.key}'"
                )
            cls._activities[metadata.name] = metadata
            return activity_func
        return decorator

    @classmethod
    def get_all_activities(cls) -> Dict[str, ActivityMetadata]:
        """Get all registered activities keyed by activity name."""
        return cls._activities

    @classmethod
    def activity_functions(cls) -> List[Callable]:
        return [metadata.activity_func for metadata in cls._activities.values()]
