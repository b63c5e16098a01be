"""Calendar, models, configuration and errors shared by every layer."""
