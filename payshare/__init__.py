"""
PayShare - Source Package

A small business bookkeeping tool that records paid jobs and splits
each payment between the company and the people who worked on it.

DESIGN PRINCIPLES:
1. The distribution engines are pure functions
2. Inputs are validated before any calculation runs
3. Every stored distribution reconciles back to its payment
4. Updates recompute and replace, never patch
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "PayShare Team"
