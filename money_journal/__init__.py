"""
Money Journal - Core Package

Local-first money journal for kids: users, transactions and savings
goals kept in a key-value store the app owns, plus a progressive
learning-card engine.

DESIGN PRINCIPLES:
1. The User record is the unit of storage consistency
2. Validate the whole object graph at every storage boundary
3. Fail loudly with typed errors, never silently drop data
4. Storage backend is swappable
5. Learning content selection is a pure, testable function
"""

__version__ = "1.0.0"
__author__ = "Money Journal Team"
