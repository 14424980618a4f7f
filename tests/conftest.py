from __future__ import annotations

from typing import Dict

import pytest
import requests

from payra_sdk import PayraSettings
from rpc_mocks import base_environment


@pytest.fixture
def environment() -> Dict[str, str]:
    return base_environment()


@pytest.fixture
def settings(environment: Dict[str, str]) -> PayraSettings:
    return PayraSettings.from_mapping(environment)


@pytest.fixture
def timeout_error() -> requests.Timeout:
    return requests.Timeout("read timed out")
