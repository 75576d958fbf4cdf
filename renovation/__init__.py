"""
Renovation Planner - Source Package

A personal home-renovation assistant for tracking one household's
renovation projects: budget and expenses, schedule phases and tasks,
materials, contacts and a renovation journal.

DESIGN PRINCIPLES:
1. Everything lives in one local database
2. Statistics are recomputed from stored records on every read
3. Validation happens before any write
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Renovation Planner Team"
