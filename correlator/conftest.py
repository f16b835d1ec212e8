import os

# Spans have nowhere to go while testing
os.environ.setdefault("DD_TRACE_ENABLED", "false")

import pytest  # noqa: E402

from adapters.openai import get_openai_adapter  # noqa: E402


@pytest.fixture(autouse=True)
def clear_caches():
    get_openai_adapter.cache_clear()
