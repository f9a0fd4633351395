"""Side panels around the map and globe views."""
