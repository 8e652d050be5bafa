"""CLI sub-commands for DevCollab."""
