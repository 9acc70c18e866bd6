"""modules — planner components (planning, preference, tools, feedback, observability)."""
