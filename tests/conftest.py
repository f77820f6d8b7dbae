import asyncio
import inspect
import os
import tempfile

# Keep the JSON store out of the working tree before settings are imported.
_test_tmp_dir = tempfile.mkdtemp(prefix="giff_bot_test_")
os.environ.setdefault("DATA_DIR", _test_tmp_dir)
os.environ.setdefault("APP_ID", "test-app")

import pytest  # noqa: E402

from giff_bot.memory.tag_store import InMemoryBackend, TagStore  # noqa: E402

DEFAULT_TAGS = ["order:random", "type:gif", "animated"]


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def store(backend):
    return TagStore(backend, DEFAULT_TAGS)


def pytest_pyfunc_call(pyfuncitem):
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames
            if name in pyfuncitem.funcargs
        }
        asyncio.run(pyfuncitem.obj(**call_kwargs))
        return True
    return None


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test as async")
