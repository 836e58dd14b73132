"""Infrastructure shared by the calendar core, the sources and the API."""
