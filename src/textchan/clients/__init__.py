"""Network-facing collaborators: the REST client and resource resolver."""
