"""
This pytest plugin provides helper functions and fixtures to facilitate testing
of the profconv converters and loaders.
"""

# this registers the hooks and fixtures defined in the modules listed below

pytest_plugins = [
    "profconv.testing.cases",
    "profconv.testing.performance",
    "profconv.testing.traces",
]
