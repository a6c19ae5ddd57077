"""Built-in plugins shipped with projctl."""
