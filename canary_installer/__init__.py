"""Canary speech-to-text environment installer.

Core design goals:
- Idempotent steps, safe to re-run after an interrupt
- Facts probed from the machine on every run, never cached
- Explicit capabilities reported back to the caller
- Centralized logging
"""

__all__ = []
