"""AWS role assumption.

This module exchanges configured Roles for temporary credentials and runs
commands with them.
"""

from .role_manager import RoleManager, build_environment

__all__ = ["RoleManager", "build_environment"]
