"""Phone receptionist: scripted call-control dialogue with calendar booking."""
