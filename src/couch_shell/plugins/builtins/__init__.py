"""Built-in plugins shipped with couch-shell."""
