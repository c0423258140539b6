"""Test package for the Mental Math Trainer.

This package contains unit tests for the question generator, the timed
presentation sequencer and the settings store, plus headless UI smoke
tests.  The UI tests use pygame's dummy video driver to avoid opening real
windows.  To run these tests, execute ``pytest`` from the project root.
"""
