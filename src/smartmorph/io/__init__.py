"""File boundary: shape records in, track samples out."""
