"""
Test suite for the Clinic Scheduler.

Contains unit tests for the scheduling engine and integration tests for the
SQL store and HTTP API.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
