# PATH: strategy/jobs/__init__.py
"""
Strategy jobs package.

Available entry points:
    python -m strategy.jobs.run_scan        # Scan loop with periodic refreshes

NOTE: This __init__.py intentionally does NOT import run_scan to avoid side
effects when importing the package. Import it directly when needed:

    from strategy.jobs.run_scan import main
"""

__all__: list[str] = []
