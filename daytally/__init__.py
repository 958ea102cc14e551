"""DayTally: personal time tracking with day ratings and analytics."""
