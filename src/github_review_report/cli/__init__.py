"""Command line interface for ghreport."""
