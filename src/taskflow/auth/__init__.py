"""Authentication and authorization.

Learn: every tenant-scoped request passes through three ordered steps:
1. Authentication gate → bearer JWT → CurrentIdentity
2. Tenancy resolver → membership row → TenantContext (org id, slug, role)
3. Role gate (membership management only) → is_authorized(role, required)

Each step is a FastAPI dependency that builds on the previous one.
"""
