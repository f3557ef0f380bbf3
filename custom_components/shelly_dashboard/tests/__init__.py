"""Tests for the Shelly Dashboard integration."""
