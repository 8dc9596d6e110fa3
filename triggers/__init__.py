from .replacer import ReplaceResult, TriggerReplacer, replace_collision_volumes

__all__ = [
    "ReplaceResult",
    "TriggerReplacer",
    "replace_collision_volumes",
]
