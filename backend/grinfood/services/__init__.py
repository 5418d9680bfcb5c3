"""Domain services and their external collaborators."""
