"""Thread-safe storage for lazily computed values."""

import threading
from typing import Any, Callable, Dict, Generic, Hashable, TypeVar

_Key = TypeVar("_Key", bound=Hashable)
_Value = TypeVar("_Value")


class LazyValues(Generic[_Key, _Value]):
    """Values that are computed once on first use and then only read.

    Each key has its own re-entrant lock, so that a computation may request
    values for *other* keys (for instance the minimal mass of a daughter).
    Two threads asking for the same key never compute it twice.
    """

    def __init__(self) -> None:
        self.__values: Dict[_Key, _Value] = dict()
        self.__locks: Dict[_Key, Any] = dict()
        self.__lock = threading.Lock()

    def __contains__(self, key: object) -> bool:
        return key in self.__values

    def __len__(self) -> int:
        return len(self.__values)

    def get(self, key: _Key, compute: Callable[[], _Value]) -> _Value:
        if key in self.__values:
            return self.__values[key]
        with self.__lock:
            key_lock = self.__locks.setdefault(key, threading.RLock())
        with key_lock:
            if key not in self.__values:
                self.__values[key] = compute()
            return self.__values[key]
