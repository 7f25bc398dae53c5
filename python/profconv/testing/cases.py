import pytest


from dataclasses import dataclass
from typing import List, Dict, Any
from pathlib import Path

"""

This module provides a helper class to give readable names to parametrized
test cases.

Parametrizing a fixture with plain dictionaries produces ids like
``case_config0``; wrapping each one in a ``Case`` uses its name instead:

    @pytest.fixture(params=[
        Case("single_complete_event", {"events": [...], "markers": 1}),
        Case("instant_only", {"events": [...], "markers": 1}),
    ])
    def case_config(request):
        return request.param.data

"""

@dataclass
class Case:

    """
    Name of the test case that will appear as test parameter in the test name
    """
    name: str

    """
    Data for the test case, typically a dictionary if more than one parameter is needed
    """
    data: Any


def pytest_make_parametrize_id(config, val, argname):

    # if the parameter is an instance of a Case, use its name as id
    if isinstance(val, Case):
        return val.name

    # otherwise, let another plugin to handle it
    return None


@pytest.fixture
def case_config(request) -> Dict:
    """
    Default configuration in case a test is not parametrized, this fixture is typically
    overridden in the test module to provide specific test cases.
    """

    return {}


def get_test_cases_from_files(files: List[Path]) -> List[Case]:
    """
    Generates test cases from a list of trace or profile files, each file becomes a test case.
    """
    return [Case(file_path.name, file_path) for file_path in files]


def get_test_cases_from_dict(cases: Dict[str, Any]) -> List[Case]:
    """
    Generates test cases from a ``{name: data}`` dictionary, preserving its order.
    """
    return [Case(name, data) for name, data in cases.items()]
