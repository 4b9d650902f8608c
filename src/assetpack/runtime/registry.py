"""Name-keyed registries owned by a loading session."""

from __future__ import annotations

from typing import Dict, Generic, Iterator, List, Optional, TypeVar

from ..logging import get_logger
from .types import Material, Texture2D

__all__ = ["Registry", "TextureRegistry", "MaterialRegistry"]

T = TypeVar("T")


class Registry(Generic[T]):
    """Case-insensitive name -> object map.

    The first registration of a name wins; later ones are refused with a
    warning and leave the existing object in place.
    """

    kind = "object"

    def __init__(self) -> None:
        self._items: Dict[str, T] = {}

    @staticmethod
    def _key(name: str) -> str:
        return name.replace("\\", "/").lower()

    def register(self, name: str, obj: T) -> bool:
        key = self._key(name)
        if key in self._items:
            get_logger("runtime").warning(
                "%s %s already registered; keeping the first", self.kind, key
            )
            return False
        self._items[key] = obj
        return True

    def lookup(self, name: str) -> Optional[T]:
        return self._items.get(self._key(name))

    def names(self) -> List[str]:
        return list(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)


class TextureRegistry(Registry[Texture2D]):
    kind = "Texture"


class MaterialRegistry(Registry[Material]):
    kind = "Material"
