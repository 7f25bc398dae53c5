# registers the profconv pytest plugin (fixtures and options) for the test suite
pytest_plugins = [
    "profconv.testing",
]
