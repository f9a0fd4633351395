"""
SeismicWatch: an interactive map and globe of recent earthquakes.
"""
