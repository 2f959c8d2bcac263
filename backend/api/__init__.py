"""
MDLive API Package.

Viewer page and update channel servers for the live preview.
Requires Python 3.11+.
"""

# Import app factories lazily to avoid circular imports
# Use: from api.main import create_app
