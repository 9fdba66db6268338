"""Test suite for the EGX screener."""
