"""
Domain services: persistence port, lifecycle engine, assignment coordinator,
audit trail and diff resolution
"""
