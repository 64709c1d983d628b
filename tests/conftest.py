"""Shared fixtures."""

from __future__ import annotations

import pytest

from parambag import ParameterBag


@pytest.fixture()
def word_bag() -> ParameterBag:
    return ParameterBag({"word": "foo_BAR_012"})


@pytest.fixture()
def filter_bag() -> ParameterBag:
    return ParameterBag({
        "digits": "0123ab",
        "email": "example@example.com",
        "url": "http://example.com/foo",
        "dec": "256",
        "hex": "0x100",
        "array": ["bang"],
    })
