import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from phi_detector import PatternRegistry, Scanner  # noqa: E402


SAMPLE_NOTE = (
    "Patient SSN: 123-45-6789. MRN: 123456789. ICD: A12.34. "
    "NIK: 1234567890123456. BPJS: 1234567890123. Date: 31/12/2000."
)


@pytest.fixture
def registry() -> PatternRegistry:
    return PatternRegistry.default()


@pytest.fixture
def scanner(registry: PatternRegistry) -> Scanner:
    return Scanner(registry, context_window=0)


@pytest.fixture
def sample_note() -> str:
    return SAMPLE_NOTE
