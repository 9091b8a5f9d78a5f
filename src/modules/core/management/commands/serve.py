"""Run the API under uvicorn with a graceful shutdown sequence.

SIGINT/SIGTERM and unhandled process-level errors (uncaught exceptions in
threads or on the event loop) all go through the same path:

1. stop accepting connections and drain in-flight requests;
2. close the database connections;
3. exit (status 1 when triggered by a fault).

If draining takes longer than ``--shutdown-timeout`` seconds the process
is terminated with status 1.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal
import threading
from typing import Any, Iterator, Optional

import structlog
import uvicorn
from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import connections
from uvicorn.server import HANDLED_SIGNALS

logger = structlog.get_logger(__name__)


class GracefulServer(uvicorn.Server):
    """``uvicorn.Server`` that funnels every exit path through ``begin_shutdown``."""

    def __init__(self, config: uvicorn.Config, shutdown_timeout: int) -> None:
        super().__init__(config)
        self.shutdown_timeout = shutdown_timeout
        self.failed = False
        self._force_exit_timer: Optional[threading.Timer] = None

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        """Install ``handle_exit`` for the run without re-raising the signal after it.

        The shutdown sequence owns the exit: connections still have to be
        closed once ``serve()`` returns.
        """
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        original_handlers = {
            sig: signal.signal(sig, self.handle_exit) for sig in HANDLED_SIGNALS
        }
        try:
            yield
        finally:
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)

    async def startup(self, sockets=None) -> None:
        asyncio.get_running_loop().set_exception_handler(self._on_loop_error)
        await super().startup(sockets=sockets)

    def handle_exit(self, sig: int, frame: Any) -> None:
        logger.warning("server.shutdown_requested", signal=signal.Signals(sig).name)
        super().handle_exit(sig, frame)
        self.begin_shutdown()

    def begin_shutdown(self) -> None:
        if self._force_exit_timer is None:
            self._force_exit_timer = threading.Timer(
                self.shutdown_timeout, self._force_exit
            )
            self._force_exit_timer.daemon = True
            self._force_exit_timer.start()
        self.should_exit = True

    def fail(self, reason: str, exc: Optional[BaseException]) -> None:
        logger.error("server.fatal_error", reason=reason, exc_info=exc)
        self.failed = True
        self.begin_shutdown()

    def cancel_force_exit(self) -> None:
        if self._force_exit_timer is not None:
            self._force_exit_timer.cancel()

    def _force_exit(self) -> None:
        logger.error("server.shutdown_timeout", timeout=self.shutdown_timeout)
        os._exit(1)

    def _on_loop_error(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        exc = context.get("exception")
        if exc is None:
            logger.error("server.loop_error", message=context.get("message"))
            return
        self.fail("unhandled_async_exception", exc)

    def on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if issubclass(args.exc_type, SystemExit):
            return
        self.fail("uncaught_exception", args.exc_value)


def close_store_connections() -> None:
    connections.close_all()
    logger.info("database.disconnected")


class Command(BaseCommand):
    help = "Serve the API with uvicorn; shuts down gracefully on signals or fatal errors."

    def add_arguments(self, parser):
        parser.add_argument("--host", default=settings.HOST)
        parser.add_argument("--port", type=int, default=settings.PORT)
        parser.add_argument(
            "--shutdown-timeout",
            type=int,
            default=settings.SHUTDOWN_TIMEOUT,
            help="Seconds to drain requests before forcing exit.",
        )

    def handle(self, *args, **options):
        from config.asgi import application

        config = uvicorn.Config(
            application,
            host=options["host"],
            port=options["port"],
            lifespan="off",
            log_config=None,
            timeout_graceful_shutdown=options["shutdown_timeout"],
        )
        server = GracefulServer(config, shutdown_timeout=options["shutdown_timeout"])

        previous_hook = threading.excepthook
        threading.excepthook = server.on_thread_exception
        logger.info(
            "server.starting",
            host=options["host"],
            port=options["port"],
            environment=settings.ENVIRONMENT,
        )
        try:
            server.run()
        except Exception as exc:
            server.fail("uncaught_exception", exc)
        finally:
            threading.excepthook = previous_hook
            close_store_connections()
            server.cancel_force_exit()

        logger.info("server.stopped", failed=server.failed)
        if server.failed:
            raise SystemExit(1)
