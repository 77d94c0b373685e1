"""Test fixtures for GitHub review reports."""
