"""Tours REST API: catalogue, image uploads, analytics and geospatial search."""
