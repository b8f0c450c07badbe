from abc import ABC, abstractmethod
from types import MappingProxyType


class Association(ABC):
    """State shared by every association kind.

    Subclasses set ``association_type`` and implement attribute injection,
    accessor registration and their own traversal operations.
    """
    association_type = None
    is_single_association = False
    accessor_methods = ()

    def __init__(self, source, target, alias=None, **options):
        self.source = source
        self.target = target
        self.options = options
        self.is_aliased = bool(alias)
        self.alias = alias or target.__name__
        self.accessors = MappingProxyType({
            method: f"{method}{self.alias[:1].upper()}{self.alias[1:]}"
            for method in self.accessor_methods
        })

    @abstractmethod
    def inject_attributes(self):
        """Add the attributes this association needs to the entities."""

    @abstractmethod
    def mixin(self, entity_cls):
        """Register the accessors of this association on entity_cls."""

    def __repr__(self):
        return (f"<{type(self).__name__} {self.source.__name__}.{self.alias} "
                f"-> {self.target.__name__}>")
