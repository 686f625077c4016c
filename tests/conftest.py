from typing import Generator

import pytest
from scoped_launcher.scope import Scope, background, derive


@pytest.fixture
def scope() -> Generator[Scope, None, None]:
    """Derived scope that is cancelled when the test finishes."""
    s, cancel = derive(background())
    yield s
    cancel()

