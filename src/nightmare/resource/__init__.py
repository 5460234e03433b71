"""Resource: the account VM state query and start."""
