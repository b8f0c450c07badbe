from .base import Association
from .belongs_to import BelongsTo
from .keys import KeyDescriptor, ResolvedKeys, resolve_keys

__all__ = [
    'Association',
    'BelongsTo',
    'KeyDescriptor',
    'ResolvedKeys',
    'resolve_keys',
]
