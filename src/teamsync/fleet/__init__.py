"""One-shot operations across the team's repositories.

Each command refreshes the local clones, narrows them down with a shell
query or a file check, and commits and pushes the result per repo.
"""
