"""Release domain: dependency graph, change classification and packaging."""
