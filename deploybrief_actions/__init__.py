"""
DeployBrief Actions

GitHub Actions for pull request evidence gating, release notes generation
and wiki publishing.
"""

__version__ = "1.0.0"
__author__ = "Development Team"
__email__ = "dev@example.com"
