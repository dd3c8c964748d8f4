"""
Tests for toolkit app.

This package contains test modules for:
- test_discord.py: DiscordClient tests
- test_email.py: EmailService tests

Usage:
    pytest toolkit/tests/
"""
