import asyncio
import inspect
import logging
from typing import Callable, List

import httpx
import pytest


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):
    """Run async test functions without requiring external plugins."""
    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            sig = inspect.signature(test_function)
            filtered_args = {k: v for k, v in pyfuncitem.funcargs.items() if k in sig.parameters}
            loop.run_until_complete(test_function(**filtered_args))
        finally:
            loop.close()
            asyncio.set_event_loop(None)
        return True
    return None


def pytest_configure(config):
    """Register markers for pytest."""
    config.addinivalue_line("markers", "asyncio: mark async tests")


# Base64 of b"pwshc-golden-master-key-0123456789".
MASTER_KEY = "cHdzaGMtZ29sZGVuLW1hc3Rlci1rZXktMDEyMzQ1Njc4OQ=="


@pytest.fixture
def master_key() -> str:
    return MASTER_KEY


class RecordingTransport:
    """httpx mock transport that keeps every request it answers."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []
        self._handler = handler
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self._handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport)


@pytest.fixture
def cosmos_documents():
    """Factory for a transport answering every query with ``body``."""

    def factory(body: str = '{"_rid":"x","Documents":[],"_count":0}', status_code: int = 200) -> RecordingTransport:
        return RecordingTransport(
            lambda request: httpx.Response(status_code, text=body, headers={"Content-Type": "application/json"})
        )

    return factory


@pytest.fixture(autouse=True)
def _reset_pwshc_logger():
    """Undo handler and level changes made by the CLI between tests."""
    package_logger = logging.getLogger("pwshc")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in package_logger.handlers[:]:
        if handler not in handlers:
            package_logger.removeHandler(handler)
    package_logger.setLevel(level)
