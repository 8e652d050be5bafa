"""DevCollab - Developer project collaboration service.

This package provides the project/collaboration data model, the profile
lifecycle, GitHub repository linking, AI-generated README documents and a
GitHub push webhook that notifies project collaborators by email.
"""

__version__ = "0.1.0"
