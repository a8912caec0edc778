"""Countdown - Cronometro regressivo de uma tentativa."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class Countdown:
    """Contagem regressiva em segundos rodando como uma unica task asyncio.

    Cada tick decrementa ``remaining`` em 1. Ao chegar a zero a task termina
    e ``on_expire`` e chamado uma vez. ``tick()`` pode ser chamado
    diretamente (testes deterministicos, sem esperar o relogio).

    Attributes:
        remaining: Segundos restantes
        interval: Intervalo real entre ticks (1.0 em producao)
    """

    def __init__(
        self,
        seconds: int,
        on_expire: Callable[[], None] | None = None,
        interval: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.remaining = max(0, seconds)
        self.interval = interval
        self._on_expire = on_expire
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def expired(self) -> bool:
        return self.remaining == 0

    def start(self) -> None:
        """Agenda a task de contagem (no-op se ja rodando ou parado)."""
        if self.running or self._stopped or self.expired:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while self.remaining > 0 and not self._stopped:
            await self._sleep(self.interval)
            if self._stopped:
                break
            self.tick()

    def tick(self) -> int:
        """Avanca um segundo. Retorna o tempo restante."""
        if self._stopped or self.remaining == 0:
            return self.remaining

        self.remaining -= 1
        if self.remaining == 0:
            logger.debug("Countdown expirou")
            if self._on_expire is not None:
                self._on_expire()
        return self.remaining

    def cancel(self) -> None:
        """Para a contagem e cancela a task pendente."""
        self._stopped = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
