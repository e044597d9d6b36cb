"""
Shared test setup.
"""
import os

# Keep test runs from writing rotating log files.
os.environ.setdefault("LOG_TO_FILE", "false")
