"""
Lock de generación por usuario.

Como máximo una generación/regeneración por usuario a la vez. El lock se
toma sin bloquear: si otro request ya lo tiene, se falla inmediatamente con
`ConcurrentGenerationInProgress` (nunca se encola).

Usuarios distintos no se bloquean entre sí.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from .errors import ConcurrentGenerationInProgress

logger = logging.getLogger(__name__)


class UserLockRegistry:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        """
        Context manager que retiene el lock del usuario durante el bloque.

        Uso:
            with locks.hold(user_id):
                ...  # cargar -> calcular -> persistir

        Raises:
            ConcurrentGenerationInProgress: el lock ya está tomado.
        """
        lock = self._lock_for(user_id)
        if not lock.acquire(blocking=False):
            logger.info("Generación rechazada para usuario %s: ya hay una en curso", user_id)
            raise ConcurrentGenerationInProgress(user_id=user_id)
        try:
            yield
        finally:
            lock.release()

    def is_held(self, user_id: str) -> bool:
        with self._guard:
            lock = self._locks.get(user_id)
        return lock is not None and lock.locked()
