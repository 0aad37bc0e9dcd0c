"""Test suite for the pet shop cart and favorites backend."""
