"""Test package for the math quiz.

The core tests drive the problem generator and round state machine with
seeded generators and a fake clock.  The UI tests run pygame with the dummy
video driver so no window is opened.  Run ``pytest`` from the project root.
"""
