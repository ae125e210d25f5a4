import logging
import os
from typing import Generator

import pytest

from tests.fake.fake_codec import RecordingEncoder
from tests.fake.fake_stream import FakeStreamWriter

from msgpipe.bootstrap.deps import get_config
from msgpipe.core.models.config import CodecConfig


@pytest.fixture
def stream_writer():
    return FakeStreamWriter()


@pytest.fixture
def encoder():
    return RecordingEncoder()


@pytest.fixture
def codec_config():
    # tiny reads so that messages are split across several chunks
    return CodecConfig(read_chunk_size=7, max_buffer_size=1024)


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("tests.msgpipe")


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    backup = os.environ.copy()
    for key in list(os.environ):
        if key.startswith("MSGPIPE_"):
            del os.environ[key]

    get_config.cache_clear()
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(backup)
        get_config.cache_clear()
