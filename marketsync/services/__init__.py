"""
Service layer: credentials, auth, gateway, orchestration and reporting.
Import concrete services from their modules.
"""
