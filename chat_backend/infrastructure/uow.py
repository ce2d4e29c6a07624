# chat_backend/infrastructure/uow.py
from typing import Any, Dict, Type

from chat_backend.infrastructure.data_mappers import DataMapper


class UoWModel:
    """Proxy that records attribute writes on the wrapped ORM object as dirty."""

    def __init__(self, model: Any, uow: "UnitOfWork"):
        self.__dict__["_model"] = model
        self.__dict__["_uow"] = uow

    def __getattr__(self, key):
        return getattr(self._model, key)

    def __setattr__(self, key, value):
        setattr(self._model, key, value)
        # pending inserts are flushed as a whole, no need to track them as dirty
        if id(self._model) not in self._uow.new:
            self._uow.register_dirty(self._model)


class UnitOfWork:
    def __init__(self) -> None:
        self.dirty: Dict[int, Any] = {}
        self.new: Dict[int, Any] = {}
        self.deleted: Dict[int, Any] = {}
        self.mappers: Dict[Type, DataMapper] = {}

    def register_mapper(self, model_type: Type, mapper: DataMapper) -> None:
        self.mappers[model_type] = mapper

    @staticmethod
    def _unwrap(model: Any) -> Any:
        return model._model if isinstance(model, UoWModel) else model

    def register_new(self, model: Any) -> UoWModel:
        model = self._unwrap(model)
        self.new[id(model)] = model
        return UoWModel(model, self)

    def register_dirty(self, model: Any) -> None:
        model = self._unwrap(model)
        model_id = id(model)
        if model_id not in self.new and model_id not in self.deleted:
            self.dirty[model_id] = model

    def register_deleted(self, model: Any) -> None:
        model = self._unwrap(model)
        model_id = id(model)
        if self.new.pop(model_id, None) is not None:
            return
        self.dirty.pop(model_id, None)
        self.deleted[model_id] = model

    def _mapper_for(self, model: Any) -> DataMapper:
        try:
            return self.mappers[type(model)]
        except KeyError:
            raise LookupError(f"No data mapper registered for {type(model).__name__}")

    async def commit(self) -> None:
        """Flush pending work through the mappers; the session owner commits."""
        for model in self.new.values():
            await self._mapper_for(model).insert(model)
        for model in self.dirty.values():
            await self._mapper_for(model).update(model)
        for model in self.deleted.values():
            await self._mapper_for(model).delete(model)

        self.new.clear()
        self.dirty.clear()
        self.deleted.clear()
