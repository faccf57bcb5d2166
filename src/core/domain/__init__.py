"""Domain models for the deployment listing.

The domain knows nothing about HTTP or the terminal: only deployments,
instances, aliases and the account scope they are listed under.
"""
