"""Authentication: the login / device approval state machine."""
