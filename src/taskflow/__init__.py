"""TaskFlow — multi-tenant project and task management API.

Organizations own projects, projects own tasks, and users reach all of it
through organization memberships that carry a role.
"""

__version__ = "0.1.0"
