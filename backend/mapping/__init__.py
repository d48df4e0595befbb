"""Geographic to planar and screen-space transforms."""
