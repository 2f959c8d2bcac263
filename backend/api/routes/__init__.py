"""
MDLive API Routes.
"""
