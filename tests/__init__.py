"""Tests for abtest-admin."""
