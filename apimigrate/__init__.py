"""
WSO2 to Tyk API Migration

Exports published APIs from WSO2 API Manager with apictl and imports
their OpenAPI definitions into the Tyk Dashboard.

Supports:
- Positional or named CLI credentials
- Duplicate detection for safe reruns
- Per-record failure tolerance
- Dry runs and JSON run reports
"""

__version__ = "0.1.0"
