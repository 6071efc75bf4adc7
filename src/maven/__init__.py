"""Maven POM support."""
