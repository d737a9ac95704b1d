"""
Test suite for the Clinic Appointment Backend.

Contains unit tests for the scheduling services and API tests for the routers.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite://"
