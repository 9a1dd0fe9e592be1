"""HTTP primitives shared by the host and every mounted module."""
