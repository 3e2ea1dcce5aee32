"""Study Progress Tracker backend."""
