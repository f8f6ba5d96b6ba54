"""Thread-safe singleton base class.

Subclasses get exactly one instance per class for the lifetime of the process (or
until :meth:`Singleton.reset` is called). Passing ``stub=True`` to the constructor
bypasses the registry and returns a fresh, unregistered instance, which is what tests
use to avoid leaking state between cases.
"""

from __future__ import annotations

import threading
import weakref
from typing import Any, ClassVar, Generic, TypeVar

T = TypeVar("T")


class Singleton(Generic[T]):
    """Base class providing per-subclass singleton instances.

    Notes
    -----
    Subclass ``__init__`` methods are still invoked on every construction, so they
    must guard on ``self._initialized`` to avoid re-running setup.
    """

    _instances: ClassVar[weakref.WeakKeyDictionary[type, Any]] = (
        weakref.WeakKeyDictionary()
    )
    _lock: ClassVar[threading.RLock] = threading.RLock()

    _initialized: bool

    def __new__(cls, *args: Any, stub: bool = False, **kwargs: Any) -> Any:
        if stub:
            instance = super().__new__(cls)
            instance._initialized = False
            return instance

        with cls._lock:
            if cls in cls._instances:
                instance = cls._instances[cls]
                if type(instance) is not cls:
                    msg = (
                        f"Singleton instance for {cls.__name__} must be a real "
                        f"instance, got {type(instance).__name__}"
                    )
                    raise TypeError(msg)
                return instance

            instance = super().__new__(cls)
            instance._initialized = False
            cls._instances[cls] = instance
            return instance

    @classmethod
    def reset(cls) -> None:
        """Drop the registered instance so the next construction builds a new one."""
        with cls._lock:
            cls._instances.pop(cls, None)

    @classmethod
    def has_instance(cls) -> bool:
        """Return whether an instance is currently registered for ``cls``."""
        with cls._lock:
            return cls in cls._instances
