"""Back office tooling for a generator maintenance company.

Bulk client import from pasted or uploaded lists, and maintenance-due alerts
over installed equipment.
"""

__version__ = "0.1.0"
