"""Collaborators that touch the host: the PowerShell runtime and the OS."""
