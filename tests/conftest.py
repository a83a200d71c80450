pytest_plugins = ["prmetrics.testing.conftest"]
