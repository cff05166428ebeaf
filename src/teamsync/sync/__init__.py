"""Multi-repo search/replace with a persistent tracked session.

Matches are found in local clones, reviewed one at a time, written in place
and tracked in a session file until they are committed and pushed.
"""
