"""Settings modules for hosting projects and the test suite."""
