import threading
import time
from collections import deque
from typing import Callable, Deque, Dict


class SlidingWindowRateLimiter:
    """
    Rate limit em memória por cliente, janela deslizante.

    Cada chave (normalmente o IP) guarda os timestamps das requisições
    aceitas dentro da janela. Chaves sem requisições na janela são
    descartadas a cada varredura, então o mapa só guarda clientes ativos.
    Processo único; não é compartilhado entre réplicas.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests e window_seconds devem ser positivos.")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        """Remove chaves cuja janela expirou; roda no máximo uma vez por janela."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        for key in list(self._hits):
            hits = self._hits[key]
            self._prune(hits, now)
            if not hits:
                del self._hits[key]

    def allow(self, key: str) -> bool:
        """Registra a requisição se houver vaga; False se o limite estourou."""
        now = self._clock()
        with self._lock:
            self._sweep(now)
            hits = self._hits.get(key)
            if hits is None:
                hits = self._hits[key] = deque()
            self._prune(hits, now)
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def retry_after(self, key: str) -> int:
        """Segundos até liberar a próxima vaga para a chave."""
        now = self._clock()
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return 0
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
                return 0
            if len(hits) < self.max_requests:
                return 0
            return max(1, int(self.window_seconds - (now - hits[0]) + 0.999))

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
