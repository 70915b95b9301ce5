"""
Persistence port and the in-memory implementation used by default.

Objects are stored as JSON per model type, so callers always get independent
copies back and never share mutable state with the store.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


class ObjectStore(ABC):
    """Key-value object store addressed by model type and id."""

    @abstractmethod
    async def save(self, obj: BaseModel) -> None:
        pass

    @abstractmethod
    async def update(self, obj: BaseModel) -> None:
        pass

    @abstractmethod
    async def fetch(self, model_type: Type[T]) -> List[T]:
        pass

    @abstractmethod
    async def get(self, model_type: Type[T], obj_id: UUID) -> Optional[T]:
        pass

    @abstractmethod
    async def delete(self, model_type: Type[T], obj_id: UUID) -> None:
        pass


def _bucket_key(model_type: Type[BaseModel]) -> str:
    return f"{model_type.__module__}.{model_type.__qualname__}"


class InMemoryObjectStore(ObjectStore):
    """ObjectStore kept in process memory, serialized by a single lock."""

    def __init__(self):
        self._buckets: Dict[str, Dict[UUID, str]] = {}
        self._lock = asyncio.Lock()

    async def save(self, obj: BaseModel) -> None:
        obj_id = getattr(obj, "id", None)
        if not isinstance(obj_id, UUID):
            raise TypeError(f"{type(obj).__name__} has no UUID id and cannot be stored")

        async with self._lock:
            bucket = self._buckets.setdefault(_bucket_key(type(obj)), {})
            bucket[obj_id] = obj.model_dump_json()

        logger.debug(f"Stored {type(obj).__name__} {obj_id}")

    async def update(self, obj: BaseModel) -> None:
        await self.save(obj)

    async def fetch(self, model_type: Type[T]) -> List[T]:
        async with self._lock:
            payloads = list(self._buckets.get(_bucket_key(model_type), {}).values())
        return [model_type.model_validate_json(payload) for payload in payloads]

    async def get(self, model_type: Type[T], obj_id: UUID) -> Optional[T]:
        async with self._lock:
            payload = self._buckets.get(_bucket_key(model_type), {}).get(obj_id)
        if payload is None:
            return None
        return model_type.model_validate_json(payload)

    async def delete(self, model_type: Type[T], obj_id: UUID) -> None:
        async with self._lock:
            self._buckets.get(_bucket_key(model_type), {}).pop(obj_id, None)

        logger.debug(f"Deleted {model_type.__name__} {obj_id}")
