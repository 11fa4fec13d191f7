"""Small pure helpers shared by services, routes and workers."""
