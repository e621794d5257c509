"""interfaces/ — application handlers plugged into the Socket Mode session."""
