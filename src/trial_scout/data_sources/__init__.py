"""HTTP clients for the external REST APIs."""
