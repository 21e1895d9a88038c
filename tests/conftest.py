from __future__ import annotations

import copy
from typing import Dict

import pytest

from tests.helpers import VALID_CONFIG


@pytest.fixture()
def valid_config() -> Dict[str, object]:
    return copy.deepcopy(VALID_CONFIG)
